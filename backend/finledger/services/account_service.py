"""Account ledger service: the authoritative balance of each account."""

from decimal import Decimal

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from finledger.config import settings
from finledger.core.exceptions import ConflictError, NotFoundError, UnauthorizedError, ValidationError
from finledger.models.account import Account
from finledger.repositories.account_repo import AccountRepository
from finledger.schemas.account import AccountCreate, AccountUpdate
from finledger.services.common import MAX_MONEY, parse_money, to_money
from finledger.services.lookup_service import LookupService

logger = structlog.get_logger()

MAX_NAME_LENGTH = 250


class AccountService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.repo = AccountRepository(db)
        self.lookups = LookupService(db)

    # ── CRUD ──────────────────────────────────────────

    async def create_account(self, data: AccountCreate, user_id: int) -> Account:
        """Create an account owned by ``user_id``."""
        self._validate_name(data.name)
        balance = parse_money(data.balance)
        if balance < 0:
            raise ValidationError("Account balance cannot be negative")
        await self._check_references(data.account_type_id, data.currency_id)

        account = await self.repo.create(
            name=data.name.strip(),
            account_type_id=data.account_type_id,
            balance=balance,
            currency_id=data.currency_id,
            user_id=user_id,
        )
        logger.info("account_created", account_id=account.id, user_id=user_id)
        return await self.repo.get_by_id(account.id)

    async def get_account(self, account_id: int, user_id: int) -> Account:
        return await self._get_user_account(account_id, user_id)

    async def list_accounts(
        self,
        user_id: int,
        account_type_id: int | None = None,
        currency_id: int | None = None,
    ) -> list[Account]:
        """All accounts of the user, newest first, optionally narrowed by type or currency."""
        return await self.repo.list_by_user(user_id, account_type_id, currency_id)

    async def update_account(self, account_id: int, data: AccountUpdate, user_id: int) -> Account:
        account = await self._get_user_account(account_id, user_id)
        fields = data.model_dump(exclude_unset=True)

        if "name" in fields:
            self._validate_name(fields["name"])
            fields["name"] = fields["name"].strip()
        if "balance" in fields:
            if fields["balance"] is None:
                raise ValidationError("Account balance is required")
            fields["balance"] = parse_money(fields["balance"])
            if fields["balance"] < 0:
                raise ValidationError("Account balance cannot be negative")
        await self._check_references(fields.get("account_type_id"), fields.get("currency_id"))

        await self.repo.update(account, fields)
        logger.info("account_updated", account_id=account_id, fields=sorted(fields))
        return await self.repo.get_by_id(account_id)

    async def delete_account(self, account_id: int, user_id: int) -> None:
        await self._get_user_account(account_id, user_id)
        try:
            await self.repo.delete(account_id)
        except IntegrityError as e:
            raise ConflictError("Account is still referenced by other records") from e
        logger.info("account_deleted", account_id=account_id, user_id=user_id)

    # ── Balance mutations ─────────────────────────────

    async def deposit(self, account_id: int, amount: Decimal, user_id: int) -> Account:
        amount = parse_money(amount)
        if amount <= 0:
            raise ValidationError("Deposit amount must be greater than 0")
        account = await self._get_user_account(account_id, user_id)
        self._check_balance_limit(account, amount)

        if not await self.repo.adjust_balance(account_id, amount, require_non_negative=False):
            raise NotFoundError("Account")
        logger.info("account_deposit", account_id=account_id, amount=str(amount))
        return await self.repo.get_by_id(account_id)

    async def withdraw(self, account_id: int, amount: Decimal, user_id: int) -> Account:
        amount = parse_money(amount)
        if amount <= 0:
            raise ValidationError("Withdrawal amount must be greater than 0")
        await self._get_user_account(account_id, user_id)

        if not await self.repo.adjust_balance(account_id, -amount):
            raise ValidationError("Insufficient funds for withdrawal")
        logger.info("account_withdrawal", account_id=account_id, amount=str(amount))
        return await self.repo.get_by_id(account_id)

    async def transfer(
        self,
        from_account_id: int,
        to_account_id: int,
        amount: Decimal,
        user_id: int,
    ) -> dict[str, Account]:
        """Move ``amount`` between two accounts of the user.

        Both rows are locked in id order before either balance changes; the
        debit and the credit share the caller's database transaction, so a
        failure on either leg rolls back both.
        """
        amount = parse_money(amount)
        if amount <= 0:
            raise ValidationError("Transfer amount must be greater than 0")
        if from_account_id == to_account_id:
            raise ValidationError("Cannot transfer to the same account")

        locked = {a.id: a for a in await self.repo.lock([from_account_id, to_account_id])}
        for account_id in (from_account_id, to_account_id):
            account = locked.get(account_id)
            if account is None:
                raise NotFoundError("Account")
            if account.user_id != user_id:
                raise UnauthorizedError("Account does not belong to the user")
        self._check_balance_limit(locked[to_account_id], amount)

        if not await self.repo.adjust_balance(from_account_id, -amount):
            raise ValidationError("Insufficient funds for transfer")
        if not await self.repo.adjust_balance(to_account_id, amount, require_non_negative=False):
            raise NotFoundError("Account")

        logger.info(
            "account_transfer",
            from_account_id=from_account_id,
            to_account_id=to_account_id,
            amount=str(amount),
        )
        return {
            "from_account": await self.repo.get_by_id(from_account_id),
            "to_account": await self.repo.get_by_id(to_account_id),
        }

    # ── Aggregates ────────────────────────────────────

    async def get_total_balance(self, user_id: int) -> Decimal:
        return to_money(await self.repo.total_balance(user_id))

    async def list_low_balance(self, user_id: int, threshold: Decimal | None = None) -> list[Account]:
        """Accounts under ``threshold``, lowest balance first."""
        if threshold is None:
            threshold = settings.low_balance_threshold
        if threshold < 0:
            raise ValidationError("Threshold cannot be negative")
        return await self.repo.list_low_balance(user_id, parse_money(threshold))

    # ── Helpers ───────────────────────────────────────

    async def _get_user_account(self, account_id: int, user_id: int) -> Account:
        """Fetch account and verify ownership."""
        account = await self.repo.get_by_id(account_id)
        if not account:
            raise NotFoundError("Account")
        if account.user_id != user_id:
            raise UnauthorizedError("Account does not belong to the user")
        return account

    @staticmethod
    def _check_balance_limit(account: Account, credit: Decimal) -> None:
        if to_money(account.balance) + credit > MAX_MONEY:
            raise ValidationError("Balance would exceed the maximum allowed")

    @staticmethod
    def _validate_name(name: str | None) -> None:
        if name is None or not name.strip():
            raise ValidationError("Account name is required")
        if len(name.strip()) > MAX_NAME_LENGTH:
            raise ValidationError("Account name cannot exceed 250 characters")

    async def _check_references(self, account_type_id: int | None, currency_id: int | None) -> None:
        if account_type_id is not None:
            await self.lookups.require_account_type(account_type_id)
        if currency_id is not None:
            await self.lookups.require_currency(currency_id)
