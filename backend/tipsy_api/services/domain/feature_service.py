"""
Feature Flag Service.

Admins list flags and upsert them in batches. The whole batch is validated
before anything is written, then applied in one transaction.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tipsy_shared.config.logging import audit_privileged_action, get_logger
from tipsy_shared.infrastructure.db import safe_commit
from tipsy_shared.utils.account_schemas import (
    FEATURE_ERROR_CODES,
    FeatureBatchResult,
    FeatureInput,
    FeatureOutput,
    FeatureUpsertResult,
)
from tipsy_shared.utils.exceptions import ConflictError, ValidationError
from tipsy_shared.utils.validators import parse_body

from tipsy_api.models import Feature, User

logger = get_logger(__name__)


def parse_feature_batch(body: Any) -> list[FeatureInput]:
    """A non-empty JSON array of feature objects; every item must be valid."""
    if not isinstance(body, list):
        raise ValidationError("Request body must be an array of features", code="INVALID_BODY_FORMAT")
    if not body:
        raise ValidationError("At least one feature is required", code="EMPTY_ARRAY")
    return [parse_body(FeatureInput, item, FEATURE_ERROR_CODES) for item in body]


class FeatureService:

    def __init__(self, db: Session):
        self._db = db

    def list_all(self) -> list[Feature]:
        return list(self._db.scalars(select(Feature).order_by(Feature.key)))

    def upsert_batch(self, user: User, items: list[FeatureInput]) -> FeatureBatchResult:
        results: list[tuple[str, Feature]] = []
        # Later items in the same batch win over earlier ones with the same key
        staged: dict[str, Feature] = {}

        for item in items:
            feature = staged.get(item.key) or self._db.scalar(select(Feature).where(Feature.key == item.key))
            if feature is None:
                feature = Feature(
                    key=item.key,
                    name=item.name,
                    description=item.description,
                    enabled=True if item.enabled is None else item.enabled,
                )
                self._db.add(feature)
                action = "created"
            else:
                feature.name = item.name
                if "description" in item.model_fields_set:
                    feature.description = item.description
                if item.enabled is not None:
                    feature.enabled = item.enabled
                action = "updated"
            staged[item.key] = feature
            results.append((action, feature))

        try:
            safe_commit(self._db)
        except IntegrityError:
            raise ConflictError("Feature key already exists", code="DUPLICATE_FEATURE")

        for _, feature in results:
            self._db.refresh(feature)

        audit_privileged_action(
            "FEATURES_UPSERTED",
            actor_id=user.id,
            actor_role=user.role,
            target="feature",
            keys=sorted(staged),
        )
        return FeatureBatchResult(
            message=f"Processed {len(results)} feature toggles",
            results=[
                FeatureUpsertResult(action=action, feature=FeatureOutput.model_validate(feature))
                for action, feature in results
            ],
        )
