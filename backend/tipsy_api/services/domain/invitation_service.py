"""
Staff Invitation Service.

Owners (or admins) invite workers by email. An invitee who already has an
account gets an ``invited`` Staff row and a notification right away; for an
unknown email only the invitation exists until the person registers and
accepts it with the token.
"""

from __future__ import annotations

import secrets
from datetime import datetime, timedelta, timezone
from urllib.parse import urlencode

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from tipsy_shared.config.constants import InvitationStatus, NotificationType, StaffStatus
from tipsy_shared.config.logging import audit_privileged_action, get_logger, mask_email
from tipsy_shared.config.settings import settings
from tipsy_shared.infrastructure.db import safe_commit
from tipsy_shared.utils.exceptions import ConflictError, NotFoundError
from tipsy_shared.utils.venue_schemas import (
    InvitationAcceptance,
    InvitationCreate,
    InvitationOutput,
    InvitationReceipt,
    InviterRef,
    StaffMemberOutput,
)

from tipsy_api.models import Staff, StaffInvitation, User
from tipsy_api.services.lookup import ReferenceLookup
from tipsy_api.services.permissions import PermissionContext
from tipsy_api.services.domain.notification_service import add_notification
from tipsy_api.services.domain.staff_service import new_staff

logger = get_logger(__name__)

NEW_USER_NOTE = "User will need to register first before accepting invitation"


def as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; they were stored as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def invitation_link(token: str) -> str:
    base = settings.app_base_url.rstrip("/")
    return f"{base}/staff/invite/accept?{urlencode({'token': token})}"


class InvitationService:
    """
    Service for staff invitations.

    Business rules:
    - The restaurant's owner or an admin invites
    - An existing membership blocks a new invitation
    - Only the invitee (matching email) accepts, before expiry
    """

    def __init__(self, db: Session):
        self._db = db
        self._lookup = ReferenceLookup(db)

    # =========================================================================
    # Invite
    # =========================================================================

    def invite(self, user: User, data: InvitationCreate) -> InvitationReceipt:
        restaurant = self._lookup.get_restaurant(data.restaurant_id)
        PermissionContext(user).require_owner_or_admin(restaurant, "invite staff to this restaurant")

        invitee = self._lookup.find_user_by_email(data.worker_email)
        staff: Staff | None = None

        if invitee is not None:
            existing = self._db.scalar(
                select(Staff).where(
                    Staff.restaurant_id == restaurant.id,
                    Staff.user_id == invitee.id,
                )
            )
            if existing is not None:
                if existing.status == StaffStatus.INVITED:
                    raise ConflictError("Invitation already sent to this worker", code="DUPLICATE_INVITATION")
                raise ConflictError("Worker is already active staff member", code="ALREADY_ACTIVE_STAFF")
        elif self._pending_for_email(restaurant.id, data.worker_email) is not None:
            raise ConflictError("Invitation already sent to this email", code="DUPLICATE_INVITATION")

        now = datetime.now(timezone.utc)
        if invitee is not None:
            staff = new_staff(restaurant, invitee, data.role, status=StaffStatus.INVITED)
            self._db.add(staff)
            self._db.flush()

        invitation = StaffInvitation(
            restaurant_id=restaurant.id,
            email=data.worker_email,
            role_in_restaurant=data.role,
            token=secrets.token_hex(32),
            status=InvitationStatus.PENDING,
            invited_by_user_id=user.id,
            staff_id=staff.id if staff is not None else None,
            expires_at=now + timedelta(days=settings.invitation_ttl_days),
        )
        self._db.add(invitation)

        if invitee is not None:
            add_notification(
                self._db,
                invitee.id,
                NotificationType.STAFF_INVITATION,
                f"Staff Invitation from {restaurant.name}",
                f"You've been invited to join {restaurant.name} as {data.role}. "
                "Click to accept the invitation.",
            )
        else:
            add_notification(
                self._db,
                user.id,
                NotificationType.PENDING_STAFF_INVITATION,
                "Pending Staff Invitation",
                f"Invitation sent to {data.worker_email} for {restaurant.name}",
            )

        try:
            safe_commit(self._db)
        except IntegrityError:
            raise ConflictError("Invitation already sent to this worker", code="DUPLICATE_INVITATION")

        self._db.refresh(invitation)
        audit_privileged_action(
            "STAFF_INVITED",
            actor_id=user.id,
            actor_role=user.role,
            target="staff_invitation",
            target_id=invitation.id,
            restaurant_id=restaurant.id,
            invitee=mask_email(data.worker_email),
            existing_account=invitee is not None,
        )

        message = "Staff invitation sent successfully"
        if invitee is None:
            message += " to new user"
        return InvitationReceipt(message=message, invitation=self._to_output(invitation))

    # =========================================================================
    # List
    # =========================================================================

    def list_for_restaurant(
        self,
        user: User,
        restaurant_id: int,
        *,
        status: str | None,
        limit: int,
        offset: int,
    ) -> list[InvitationOutput]:
        restaurant = self._lookup.get_restaurant(restaurant_id)
        PermissionContext(user).require_owner_or_admin(restaurant, "view invitations of this restaurant")

        query = (
            select(StaffInvitation)
            .options(joinedload(StaffInvitation.restaurant), joinedload(StaffInvitation.invited_by))
            .where(StaffInvitation.restaurant_id == restaurant.id)
        )
        if status is not None:
            query = query.where(StaffInvitation.status == status)
        query = query.order_by(StaffInvitation.created_at.desc(), StaffInvitation.id.desc())

        invitations = self._db.scalars(query.offset(offset).limit(limit))
        return [self._to_output(invitation) for invitation in invitations]

    # =========================================================================
    # Accept
    # =========================================================================

    def accept(self, user: User, token: str) -> InvitationAcceptance:
        invitation = self._lookup.get_invitation_by_token(token)

        if invitation.email.lower() != user.email.lower():
            PermissionContext(user).deny("accept this invitation", invitation_id=invitation.id)
        if invitation.status != InvitationStatus.PENDING:
            raise NotFoundError("Invitation", code="INVITATION_NOT_FOUND", status=invitation.status)

        now = datetime.now(timezone.utc)
        if as_utc(invitation.expires_at) <= now:
            raise ConflictError("Invitation has expired", code="INVITATION_EXPIRED")

        restaurant = invitation.restaurant
        staff = invitation.staff
        if staff is None:
            staff = self._db.scalar(
                select(Staff).where(
                    Staff.restaurant_id == restaurant.id,
                    Staff.user_id == user.id,
                )
            )
        if staff is None:
            staff = new_staff(restaurant, user, invitation.role_in_restaurant)
            self._db.add(staff)
        elif staff.status != StaffStatus.ACTIVE:
            staff.status = StaffStatus.ACTIVE
            staff.role_in_restaurant = invitation.role_in_restaurant
            staff.joined_at = now
        self._db.flush()

        invitation.status = InvitationStatus.ACCEPTED
        invitation.accepted_at = now
        invitation.staff_id = staff.id

        add_notification(
            self._db,
            invitation.invited_by_user_id,
            NotificationType.INVITATION_ACCEPTED,
            "Invitation Accepted",
            f"{user.name} joined {restaurant.name} as {invitation.role_in_restaurant}",
        )

        try:
            safe_commit(self._db)
        except IntegrityError:
            raise ConflictError("Membership could not be created", code="DUPLICATE_STAFF")

        self._db.refresh(staff)
        logger.info(
            "Invitation accepted",
            invitation_id=invitation.id,
            staff_id=staff.id,
            restaurant_id=restaurant.id,
            user_id=user.id,
        )
        return InvitationAcceptance(
            message=f"You joined {restaurant.name}",
            staff=StaffMemberOutput.model_validate(staff),
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    def _pending_for_email(self, restaurant_id: int, email: str) -> StaffInvitation | None:
        return self._db.scalar(
            select(StaffInvitation).where(
                StaffInvitation.restaurant_id == restaurant_id,
                StaffInvitation.email == email,
                StaffInvitation.status == InvitationStatus.PENDING,
            )
        )

    def _to_output(self, invitation: StaffInvitation) -> InvitationOutput:
        inviter = invitation.invited_by
        return InvitationOutput(
            id=invitation.id,
            restaurant_id=invitation.restaurant_id,
            restaurant_name=invitation.restaurant.name,
            worker_email=invitation.email,
            role=invitation.role_in_restaurant,
            status=invitation.status,
            staff_id=invitation.staff_id,
            invitation_token=invitation.token,
            invitation_link=invitation_link(invitation.token),
            invited_at=invitation.created_at,
            expires_at=invitation.expires_at,
            inviter_details=InviterRef(name=inviter.name, email=inviter.email),
            note=NEW_USER_NOTE if invitation.staff_id is None and invitation.status == InvitationStatus.PENDING else None,
        )
