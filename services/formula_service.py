"""
Formula configuration service.

Reads and edits the versioned pricing formula config. Editing only bumps
the version; CatalogService recomputes stale prices on its next read.
"""

from datetime import datetime, timezone
from typing import Optional
import structlog

from models.formula import (
    FormulaConfig,
    FormulaParametersUpdate,
    FormulaProfile,
    PricePreviewRequest,
)
from models.product import PricingResult
from services.pricing_service import compute_price
from services.storage_service import StorageService, get_storage_service, FORMULAS_KEY
from exceptions import InvalidFormulaProfileError

logger = structlog.get_logger(__name__)


class FormulaService:
    """
    Formula config business logic.

    The stored blob is the single source of truth; nothing is cached
    between calls.
    """

    def __init__(self, storage: Optional[StorageService] = None):
        self.storage = storage or get_storage_service()

    def get_config(self) -> FormulaConfig:
        """Current config, or the defaults if none has been saved."""
        stored = self.storage.get(FORMULAS_KEY)
        if not stored:
            return FormulaConfig()
        return FormulaConfig.model_validate(stored)

    def update_profile(self, profile: str, data: FormulaParametersUpdate) -> FormulaConfig:
        """
        Change one profile's parameters.

        Args:
            profile: wine, spirits, or non_alcoholic
            data: Fields to change

        Returns:
            New config with version bumped

        Raises:
            InvalidFormulaProfileError: If profile is unknown
        """
        try:
            key = FormulaProfile(profile)
        except ValueError:
            raise InvalidFormulaProfileError(profile)

        config = self.get_config()
        changes = data.model_dump(exclude_none=True)
        if not changes:
            return config

        current = config.for_profile(key)
        profiles = dict(config.profiles)
        profiles[key] = current.model_copy(update=changes)

        updated = FormulaConfig(
            version=config.version + 1,
            updated_at=datetime.now(timezone.utc),
            profiles=profiles,
        )
        self.storage.set(FORMULAS_KEY, updated.model_dump(mode="json"))

        logger.info(
            "formula_updated",
            profile=key.value,
            fields=list(changes.keys()),
            version=updated.version
        )
        return updated

    def reset(self) -> FormulaConfig:
        """Restore default parameters as a new version."""
        config = self.get_config()
        defaults = FormulaConfig(
            version=config.version + 1,
            updated_at=datetime.now(timezone.utc),
        )
        self.storage.set(FORMULAS_KEY, defaults.model_dump(mode="json"))
        logger.info("formula_reset", version=defaults.version)
        return defaults

    def preview_price(self, request: PricePreviewRequest) -> PricingResult:
        """Price a hypothetical product with the current config."""
        return compute_price(
            request.cost,
            request.pack_size,
            request.bottle_size,
            request.category,
            self.get_config(),
        )


# Singleton instance for convenience
_formula_service: Optional[FormulaService] = None


def get_formula_service() -> FormulaService:
    """Get or create FormulaService instance."""
    global _formula_service
    if _formula_service is None:
        _formula_service = FormulaService()
    return _formula_service
