"""
Feature flag administration. Admin only.
"""

from typing import Any

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from tipsy_shared.infrastructure.db import get_db
from tipsy_shared.utils.account_schemas import FeatureBatchResult, FeatureOutput

from tipsy_api.models import User
from tipsy_api.routers._common import current_user
from tipsy_api.services.domain import FeatureService
from tipsy_api.services.domain.feature_service import parse_feature_batch
from tipsy_api.services.permissions import PermissionContext


router = APIRouter(tags=["feature-toggles"])


@router.get("/feature-toggles", response_model=list[FeatureOutput])
def list_features(
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
) -> list[FeatureOutput]:
    PermissionContext(user).require_admin("list feature toggles")
    return [FeatureOutput.model_validate(feature) for feature in FeatureService(db).list_all()]


@router.patch("/feature-toggles", response_model=FeatureBatchResult)
def upsert_features(
    body: Any = Body(default=None),
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
) -> FeatureBatchResult:
    """
    Upsert a batch of flags by key.

    Every item is validated before anything is written; the batch is then
    applied in a single transaction.
    """
    PermissionContext(user).require_admin("update feature toggles")
    items = parse_feature_batch(body)
    return FeatureService(db).upsert_batch(user, items)
