from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..approvals.authority import Actor, ApprovalAuthority
from ..audit.model import audit_value
from ..audit.repository import AuditLog
from ..common.datetime_utils import now_local
from ..common.validators import optional_text, require_non_negative, require_positive
from ..core.enums import LeaveType
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..database.transaction import TransactionManager, begin
from ..users.repository import UserRepository
from .model import LeaveBalance, LeaveEntitlement
from .repository import EntitlementRepository

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


class EntitlementLedger:
    """Per-user, per-year leave balances.

    Only this class mutates balances. Deduction does not re-check for
    sufficient funds: callers (the leave workflow) check first.
    """

    def __init__(
        self,
        entitlements: EntitlementRepository,
        users: UserRepository,
        *,
        authority: Optional[ApprovalAuthority] = None,
        tx: Optional[TransactionManager] = None,
        audit: Optional[AuditLog] = None,
    ):
        self._entitlements = entitlements
        self._users = users
        self._authority = authority or ApprovalAuthority(users)
        self._tx = tx
        self._audit = audit

    def allocate(
        self,
        *,
        user_id: int,
        year: int,
        casual: object,
        earned: object,
        comp_off: object,
        actor_id: Optional[int] = None,
    ) -> LeaveBalance:
        casual_d = require_non_negative(casual, "Casual leave balance")
        earned_d = require_non_negative(earned, "Earned leave balance")
        comp_off_d = require_non_negative(comp_off, "Compensatory off balance")
        if int(year) <= 0:
            raise ValidationError("Year is invalid")

        with begin(self._tx):
            if not self._users.get_by_id(int(user_id)):
                raise NotFoundError("User not found")

            before = self._entitlements.get(int(user_id), int(year), for_update=True)
            self._entitlements.upsert(
                user_id=int(user_id), year=int(year), casual=casual_d, earned=earned_d, comp_off=comp_off_d
            )
            self._record(
                user_id=int(user_id),
                action="Leave Entitlement Allocated",
                entity_id=f"{int(user_id)}:{int(year)}",
                old_value=audit_value(casual=before.casual, earned=before.earned, comp_off=before.comp_off) if before else None,
                new_value=audit_value(casual=casual_d, earned=earned_d, comp_off=comp_off_d, allocated_by=actor_id),
            )

        logger.info(
            "%s leave entitlement for user %s for year %s",
            "Updated" if before else "Created", user_id, year,
        )
        return LeaveBalance(year=int(year), casual=casual_d, earned=earned_d, comp_off=comp_off_d)

    def get_balance(self, user_id: int, year: int) -> Optional[LeaveBalance]:
        e = self._entitlements.get(int(user_id), int(year))
        return LeaveBalance.from_entitlement(e) if e else None

    def get_entitlement(self, user_id: int, year: int, *, for_update: bool = False) -> Optional[LeaveEntitlement]:
        return self._entitlements.get(int(user_id), int(year), for_update=for_update)

    def deduct(self, *, user_id: int, year: int, leave_type: LeaveType, days: Decimal, reference: str = "") -> None:
        with begin(self._tx):
            e = self._entitlements.get(int(user_id), int(year), for_update=True)
            if not e:
                raise NotFoundError("Leave entitlement not found")

            self._entitlements.adjust(entitlement_id=e.entitlement_id, leave_type=leave_type, delta=-Decimal(days))
            self._record(
                user_id=int(user_id),
                action="Leave Balance Deducted",
                entity_id=str(e.entitlement_id),
                old_value=audit_value(leave_type=leave_type.value, balance=e.balance_for(leave_type)),
                new_value=audit_value(
                    leave_type=leave_type.value,
                    balance=e.balance_for(leave_type) - Decimal(days),
                    reference=reference,
                ),
            )

        logger.info("Deducted %s %s day(s) from user %s for year %s", days, leave_type.value, user_id, year)

    def accrue_comp_off(self, *, user_id: int, year: int, amount: Decimal, reason: str = "") -> None:
        amount = Decimal(amount)
        with begin(self._tx):
            e = self._entitlements.get(int(user_id), int(year), for_update=True)
            if e is None:
                entitlement_id = self._entitlements.create(
                    user_id=int(user_id), year=int(year), casual=ZERO, earned=ZERO, comp_off=amount
                )
                before = ZERO
            else:
                self._entitlements.adjust(
                    entitlement_id=e.entitlement_id, leave_type=LeaveType.COMPENSATORY_OFF, delta=amount
                )
                entitlement_id = e.entitlement_id
                before = e.comp_off

            self._record(
                user_id=int(user_id),
                action="Compensatory Off Accrued",
                entity_id=str(entitlement_id),
                old_value=audit_value(comp_off=before),
                new_value=audit_value(comp_off=before + amount, reason=reason),
            )

        logger.info("Added %s day(s) compensatory off to user %s for year %s", amount, user_id, year)

    def assign_comp_off(
        self,
        *,
        actor: Actor,
        employee_id: int,
        days: object,
        reason: Optional[str] = None,
        admin_path: bool = False,
        now: Optional[datetime] = None,
    ) -> None:
        """Manual comp-off grant by a manager (direct reports) or an administrator."""

        now = now or now_local()
        year = now.year
        amount = require_positive(days, "Days")
        reason = optional_text(reason, "Reason") or ""

        with begin(self._tx):
            employee = self._users.get_by_id(int(employee_id))
            if self._authority.bypasses_hierarchy(actor, admin_path=admin_path):
                if not employee or not employee.is_active:
                    raise NotFoundError("Employee not found or inactive")
                if not self._entitlements.get(int(employee_id), year, for_update=True):
                    raise NotFoundError("Leave entitlement not found for current year")
            else:
                if not employee or not employee.is_active or not self._authority.can_act_on(actor, employee.user_id):
                    raise AuthorizationError("Employee not found or not a subordinate")

            self.accrue_comp_off(
                user_id=int(employee_id),
                year=year,
                amount=amount,
                reason=f"{actor.role.value} {actor.user_id} assigned {amount} day(s). Reason: {reason}",
            )

        logger.info("Assigned %s comp off day(s) to employee %s by %s %s", amount, employee_id, actor.role.value, actor.user_id)

    def _record(self, *, user_id: int, action: str, entity_id: str, old_value: Optional[str], new_value: Optional[str]) -> None:
        if self._audit is None:
            return
        self._audit.append(
            user_id=user_id,
            action=action,
            entity_type="LeaveEntitlement",
            entity_id=entity_id,
            old_value=old_value,
            new_value=new_value,
        )
