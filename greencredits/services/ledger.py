from __future__ import annotations

import logging
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from bson import ObjectId

from greencredits.core.enums import TransactionType
from greencredits.core.errors import InsufficientCredits, NotFoundError, ValidationError
from greencredits.core.rewards import REWARD_CATALOG
from greencredits.models.credit import CreditAccount, CreditActions, EarnedBadge, Transaction
from greencredits.repositories.credit_repository import CreditRepository

logger = logging.getLogger(__name__)


def make_transaction(
    type_: TransactionType,
    amount: int,
    description: str,
    ref: Optional[str] = None,
    at: Optional[datetime] = None,
) -> Transaction:
    return Transaction(
        type=type_,
        amount=amount,
        description=description,
        ref=ref,
        timestamp=at or datetime.utcnow(),
    )


def _tx_doc(tx: Transaction) -> dict:
    doc = tx.model_dump(mode="python")
    doc["type"] = tx.type.value
    return doc


class CreditLedger:
    """
    Owns balances, the transaction trail and the badge list of each account.

    Each mutation is a single document update so a balance never changes
    without its transaction entries.
    """

    def __init__(self, repo: CreditRepository, actions: CreditActions = REWARD_CATALOG.actions):
        self.repo = repo
        self.actions = actions

    async def get_account(self, user_id: ObjectId) -> CreditAccount:
        doc = await self.repo.find_by_user(user_id)
        if not doc:
            raise NotFoundError("credit account", user_id)
        return CreditAccount(**doc)

    async def open_account(self, user_id: ObjectId, at: Optional[datetime] = None) -> CreditAccount:
        welcome = make_transaction(
            TransactionType.bonus, self.actions.welcome_bonus, "Welcome bonus! 🎉", at=at
        )
        account = CreditAccount(
            user_id=user_id,
            total_credits=welcome.amount,
            available_credits=welcome.amount,
            transactions=[welcome],
        )
        doc = account.model_dump(mode="python", exclude={"id"})
        doc["user_id"] = user_id
        doc["transactions"] = [_tx_doc(welcome)]
        inserted = await self.repo.insert(doc)
        logger.info("credit account opened user_id=%s", user_id)
        return CreditAccount(**inserted)

    async def award(
        self,
        user_id: ObjectId,
        transactions: Sequence[Transaction],
        ref: Optional[str] = None,
        report_count: int = 0,
        reports_verified: int = 0,
    ) -> CreditAccount:
        """
        Post earned/bonus entries and the matching balance increments.

        A repeated call with the same ``ref`` leaves the account untouched and
        returns it as stored.
        """
        for tx in transactions:
            if tx.type == TransactionType.redeemed or tx.amount < 0:
                raise ValidationError("award accepts only positive earned/bonus entries")

        amount = sum(tx.amount for tx in transactions)
        counters: Dict[str, int] = {"total_credits": amount, "available_credits": amount}
        if report_count:
            counters["report_count"] = report_count
        if reports_verified:
            counters["reports_verified"] = reports_verified

        docs = [_tx_doc(tx.model_copy(update={"ref": tx.ref or ref})) for tx in transactions]
        updated = await self.repo.post(user_id, docs, counters, ref=ref)
        if updated is None:
            account = await self.get_account(user_id)
            logger.info("credits already posted user_id=%s ref=%s", user_id, ref)
            return account
        logger.info("credits posted user_id=%s amount=%s ref=%s", user_id, amount, ref)
        return CreditAccount(**updated)

    async def redeem(self, user_id: ObjectId, cost: int, description: str) -> int:
        if cost <= 0:
            raise ValidationError("Redemption cost must be positive")

        tx = make_transaction(TransactionType.redeemed, -cost, f"Redeemed: {description}")
        updated = await self.repo.spend(user_id, cost, _tx_doc(tx))
        if updated is None:
            account = await self.get_account(user_id)
            raise InsufficientCredits(account.available_credits, cost)

        logger.info("credits redeemed user_id=%s cost=%s", user_id, cost)
        return int(updated["available_credits"])

    async def grant_badges(self, user_id: ObjectId, badges: List[EarnedBadge]) -> List[EarnedBadge]:
        granted = []
        for badge in badges:
            if await self.repo.add_badge(user_id, badge.model_dump(mode="python")):
                granted.append(badge)
        return granted
