"""Expense use cases and expense aggregation"""
import logging
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from application.dtos import ExpenseAggregate, ExpenseCategoryAmount, category_amount
from domain.entities import Expense
from domain.enums import ExpenseCategory, CurrencyCode, PaymentMethod
from domain.financials import ZERO, round_money
from domain.repositories import ExpenseRepository

logger = logging.getLogger(__name__)


class ExpenseAggregator:
    """Sums expenses by business date and by category.

    Expenses belong to a single business date, so nothing is spread across
    days the way reservation revenue is.
    """

    def __init__(self, expense_repo: ExpenseRepository):
        self.expense_repo = expense_repo

    async def aggregate(self, start: date, end: date, currency: CurrencyCode) -> ExpenseAggregate:
        """Expenses with start <= business_date <= end in ``currency``"""
        if end < start:
            return ExpenseAggregate(total=ZERO)

        expenses = await self.expense_repo.find_by_business_date_range(start, end, currency)
        by_day: Dict[date, Decimal] = {}
        by_category: Dict[ExpenseCategory, Decimal] = {}
        for expense in expenses:
            by_day[expense.business_date] = by_day.get(expense.business_date, Decimal("0")) + expense.amount
            by_category[expense.category] = by_category.get(expense.category, Decimal("0")) + expense.amount

        logger.debug("Aggregated %d expenses %s..%s %s", len(expenses), start, end, currency.value)
        return ExpenseAggregate(
            total=round_money(sum(by_day.values(), ZERO)),
            by_day={day: round_money(amount) for day, amount in by_day.items()},
            by_category=self._categories(by_category)
        )

    @staticmethod
    def _categories(by_category: Dict[ExpenseCategory, Decimal]) -> List[ExpenseCategoryAmount]:
        return [
            category_amount(category, round_money(by_category[category]))
            for category in sorted(by_category)
        ]


class ExpenseService:
    """Service for Expense use cases"""

    def __init__(self, repository: ExpenseRepository):
        self.repository = repository

    async def create_expense(
        self,
        business_date: date,
        category: ExpenseCategory,
        amount: Decimal,
        description: str,
        currency_code: CurrencyCode = CurrencyCode.EGP,
        currency_other: Optional[str] = None,
        payment_method: PaymentMethod = PaymentMethod.CASH,
        vendor: Optional[str] = None,
        branch_id: Optional[UUID] = None
    ) -> Expense:
        """Record an expense against a business date"""
        expense = Expense(
            branch_id=branch_id,
            business_date=business_date,
            category=category,
            amount=amount,
            currency_code=currency_code,
            currency_other=currency_other,
            payment_method=payment_method,
            description=description,
            vendor=vendor
        )
        expense.check_currency()
        saved = await self.repository.save(expense)
        logger.info("Expense %s recorded: %s %s on %s", saved.expense_id, amount, currency_code.value, business_date)
        return saved

    async def get_expense(self, expense_id: UUID) -> Optional[Expense]:
        return await self.repository.find_by_id(expense_id)

    async def list_expenses(
        self,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        category: Optional[ExpenseCategory] = None,
        currency: Optional[CurrencyCode] = None
    ) -> Tuple[List[Expense], Decimal]:
        """Filtered expenses, newest business date first, with their total"""
        expenses = await self.repository.find_by_business_date_range(date_from, date_to, currency)
        if category is not None:
            expenses = [e for e in expenses if e.category == category]
        expenses.sort(key=lambda e: (e.business_date, e.created_at), reverse=True)
        total = round_money(sum((e.amount for e in expenses), ZERO))
        return expenses, total
