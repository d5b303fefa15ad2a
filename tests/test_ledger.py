from datetime import date, timedelta
from decimal import Decimal

import pytest

from expense_tracker.core.results import Err, Ok
from expense_tracker.models.errors import NotFound, ValidationError
from expense_tracker.models.expense import ExpenseFilter, ExpenseIn
from expense_tracker.services.ledger import ExpenseLedger, resolve_date_bounds

TODAY = date(2025, 6, 15)


@pytest.fixture
def fixed_ledger(db):
    return ExpenseLedger(db, today=lambda: TODAY)


def _create(ledger, owner_id, **fields):
    fields.setdefault("amount", "100.50")
    fields.setdefault("description", "Test expense")
    result = ledger.create(owner_id, ExpenseIn(**fields))
    assert isinstance(result, Ok), result
    return result.value


def _errors(result):
    assert isinstance(result, Err)
    assert isinstance(result.error, ValidationError)
    return result.error.errors


class TestCreate:
    def test_creates_with_valid_data(self, fixed_ledger, make_user):
        user = make_user()
        expense = _create(
            fixed_ledger, user.id, category="groceries", currency="EUR", date="2025-06-01"
        )
        assert expense.amount == Decimal("100.50")
        assert expense.description == "Test expense"
        assert expense.category == "groceries"
        assert expense.currency == "EUR"
        assert expense.date == date(2025, 6, 1)
        assert expense.user_id == user.id

    def test_defaults_applied(self, fixed_ledger, make_user):
        user = make_user()
        expense = _create(fixed_ledger, user.id)
        assert expense.date == TODAY
        assert expense.category == "others"
        assert expense.currency == "USD"

    def test_empty_strings_take_defaults(self, fixed_ledger, make_user):
        expense = _create(fixed_ledger, make_user().id, category="", currency="", date="")
        assert (expense.category, expense.currency, expense.date) == ("others", "USD", TODAY)

    def test_amount_is_quantized(self, fixed_ledger, make_user):
        expense = _create(fixed_ledger, make_user().id, amount=Decimal("12.345"))
        assert expense.amount == Decimal("12.35")
        assert str(expense.amount) == "12.35"

    def test_owner_comes_from_caller_not_payload(self, fixed_ledger, make_user):
        owner, other = make_user(), make_user()
        payload = ExpenseIn.model_validate(
            {"amount": "5.00", "description": "Coffee", "user_id": other.id}
        )
        result = fixed_ledger.create(owner.id, payload)
        assert result.value.user_id == owner.id
        assert fixed_ledger.list(other.id) == []

    @pytest.mark.parametrize(
        "field, value, message",
        [
            ("amount", None, "can't be blank"),
            ("amount", "invalid", "is invalid"),
            ("amount", "-10.50", "must be greater than 0"),
            ("amount", "0", "must be greater than 0"),
            ("amount", "100000000", "must be less than 100000000"),
            ("amount", "99999999.995", "must be less than 100000000"),
            ("amount", "1e30", "must be less than 100000000"),
            ("amount", "1" + "0" * 29, "must be less than 100000000"),
            ("amount", "1e999999999", "must be less than 100000000"),
            ("amount", "-1e30", "must be greater than 0"),
            ("amount", "0.004", "must be greater than 0"),
            ("description", None, "can't be blank"),
            ("description", "", "can't be blank"),
            ("description", "a" * 256, "should be at most 255 character(s)"),
            ("category", "invalid_category", "is invalid"),
            ("currency", "usd", "must be a valid 3-letter ISO currency code"),
            ("currency", "US", "must be a valid 3-letter ISO currency code"),
            ("date", "2025-13-40", "is invalid"),
        ],
    )
    def test_rejects_invalid_fields(self, fixed_ledger, make_user, db, field, value, message):
        user = make_user()
        fields = {"amount": "100.50", "description": "Test expense", field: value}
        errors = _errors(fixed_ledger.create(user.id, ExpenseIn(**fields)))
        assert errors == {field: [message]}
        assert db.count_expenses(user.id) == 0

    def test_reports_all_errors_together(self, fixed_ledger, make_user):
        errors = _errors(
            fixed_ledger.create(
                make_user().id, ExpenseIn(amount="-1", description="", category="food")
            )
        )
        assert set(errors) == {"amount", "description", "category"}


class TestGet:
    def test_returns_own_expense(self, fixed_ledger, make_user):
        user = make_user()
        expense = _create(fixed_ledger, user.id)
        assert fixed_ledger.get(user.id, expense.id) == Ok(expense)

    def test_foreign_and_missing_are_indistinguishable(self, fixed_ledger, make_user):
        owner, intruder = make_user(), make_user()
        expense = _create(fixed_ledger, owner.id)
        foreign = fixed_ledger.get(intruder.id, expense.id)
        missing = fixed_ledger.get(intruder.id, 999999)
        assert foreign == missing == Err(NotFound("expense"))

    def test_out_of_range_id_is_not_found(self, fixed_ledger, make_user):
        user = make_user()
        assert fixed_ledger.get(user.id, 2**70) == Err(NotFound("expense"))
        assert fixed_ledger.get(user.id, 0) == Err(NotFound("expense"))


class TestUpdate:
    def test_updates_supplied_fields_and_keeps_the_rest(self, fixed_ledger, make_user):
        user = make_user()
        expense = _create(fixed_ledger, user.id, category="groceries", date="2025-05-01")
        result = fixed_ledger.update(
            expense, ExpenseIn(amount="200.75", description="Updated", category="electronics")
        )
        updated = result.value
        assert updated.id == expense.id
        assert updated.amount == Decimal("200.75")
        assert updated.description == "Updated"
        assert updated.category == "electronics"
        assert updated.date == date(2025, 5, 1)
        assert updated.currency == "USD"

    def test_blank_defaulted_fields_keep_stored_values(self, fixed_ledger, make_user):
        user = make_user()
        expense = _create(
            fixed_ledger, user.id, category="health", currency="EUR", date="2025-05-01"
        )
        updated = fixed_ledger.update(
            expense, ExpenseIn(date="", category="  ", currency="", description="Edited")
        ).value
        assert updated.date == date(2025, 5, 1)
        assert updated.category == "health"
        assert updated.currency == "EUR"
        assert updated.description == "Edited"

    def test_blank_required_fields_are_rejected_on_update(self, fixed_ledger, make_user):
        expense = _create(fixed_ledger, make_user().id)
        errors = _errors(fixed_ledger.update(expense, ExpenseIn(amount="", description="")))
        assert errors == {"amount": ["can't be blank"], "description": ["can't be blank"]}

    def test_owner_is_immutable(self, fixed_ledger, make_user):
        owner, other = make_user(), make_user()
        expense = _create(fixed_ledger, owner.id)
        payload = ExpenseIn.model_validate({"description": "Mine now", "user_id": other.id})
        updated = fixed_ledger.update(expense, payload).value
        assert updated.user_id == owner.id
        assert fixed_ledger.list(other.id) == []

    def test_invalid_update_leaves_row_untouched(self, fixed_ledger, make_user):
        user = make_user()
        expense = _create(fixed_ledger, user.id)
        errors = _errors(fixed_ledger.update(expense, ExpenseIn(amount="0", currency="dollars")))
        assert set(errors) == {"amount", "currency"}
        assert fixed_ledger.get(user.id, expense.id).value.amount == Decimal("100.50")

    def test_update_of_deleted_expense(self, fixed_ledger, make_user):
        user = make_user()
        expense = _create(fixed_ledger, user.id)
        fixed_ledger.delete(expense)
        assert fixed_ledger.update(expense, ExpenseIn(description="x")) == Err(
            NotFound("expense")
        )


class TestDelete:
    def test_hard_delete(self, fixed_ledger, make_user):
        user = make_user()
        expense = _create(fixed_ledger, user.id)
        assert fixed_ledger.delete(expense).value.id == expense.id
        assert fixed_ledger.get(user.id, expense.id) == Err(NotFound("expense"))
        assert fixed_ledger.delete(expense) == Err(NotFound("expense"))


class TestResolveDateBounds:
    @pytest.mark.parametrize(
        "period, days", [("last_week", 7), ("last_month", 30), ("last_3_months", 90)]
    )
    def test_periods(self, period, days):
        bounds = resolve_date_bounds(ExpenseFilter(period=period), TODAY)
        assert bounds == (TODAY - timedelta(days=days), None)

    def test_explicit_ranges(self):
        start, end = date(2025, 1, 1), date(2025, 1, 31)
        assert resolve_date_bounds(ExpenseFilter(from_date=start, to_date=end), TODAY) == (
            start,
            end,
        )
        assert resolve_date_bounds(ExpenseFilter(from_date=start), TODAY) == (start, None)
        assert resolve_date_bounds(ExpenseFilter(to_date=end), TODAY) == (None, end)

    def test_period_wins_over_range(self):
        f = ExpenseFilter(period="last_week", from_date=date(2020, 1, 1), to_date=date(2020, 2, 1))
        assert resolve_date_bounds(f, TODAY) == (TODAY - timedelta(days=7), None)

    def test_no_filter_or_unknown_period(self):
        assert resolve_date_bounds(ExpenseFilter(), TODAY) == (None, None)
        assert resolve_date_bounds(ExpenseFilter(period="yesterday"), TODAY) == (None, None)


class TestFilterFromQuery:
    def test_parses_valid_values(self):
        f = ExpenseFilter.from_query("last_month", "2025-01-01", "2025-01-31")
        assert f == ExpenseFilter("last_month", date(2025, 1, 1), date(2025, 1, 31))

    def test_unknown_period_dropped(self):
        assert ExpenseFilter.from_query(period="forever") == ExpenseFilter()

    def test_malformed_single_date_dropped(self):
        assert ExpenseFilter.from_query(from_date="not-a-date") == ExpenseFilter()
        assert ExpenseFilter.from_query(to_date="2025-02-30") == ExpenseFilter()

    def test_one_malformed_date_in_a_pair_drops_both(self):
        assert ExpenseFilter.from_query(from_date="2025-01-01", to_date="bad") == ExpenseFilter()


class TestList:
    def test_scenario_periods_ranges_and_isolation(self, fixed_ledger, make_user):
        a, b = make_user(), make_user()
        today = _create(fixed_ledger, a.id, description="today")
        minus5 = _create(fixed_ledger, a.id, description="-5", date=TODAY - timedelta(days=5))
        minus20 = _create(fixed_ledger, a.id, description="-20", date=TODAY - timedelta(days=20))
        _create(fixed_ledger, a.id, description="-80", date=TODAY - timedelta(days=80))
        _create(fixed_ledger, b.id, description="b today")

        last_week = fixed_ledger.list(a.id, ExpenseFilter(period="last_week"))
        assert [e.id for e in last_week] == [today.id, minus5.id]

        assert len(fixed_ledger.list(b.id, ExpenseFilter())) == 1

        ranged = fixed_ledger.list(
            a.id,
            ExpenseFilter(
                from_date=TODAY - timedelta(days=25), to_date=TODAY - timedelta(days=10)
            ),
        )
        assert [e.id for e in ranged] == [minus20.id]

    def test_period_has_no_upper_bound(self, fixed_ledger, make_user):
        user = make_user()
        future = _create(fixed_ledger, user.id, date=TODAY + timedelta(days=3))
        listed = fixed_ledger.list(user.id, ExpenseFilter(period="last_week"))
        assert [e.id for e in listed] == [future.id]

    def test_range_is_inclusive(self, fixed_ledger, make_user):
        user = make_user()
        first = _create(fixed_ledger, user.id, date="2025-01-01")
        last = _create(fixed_ledger, user.id, date="2025-01-31")
        _create(fixed_ledger, user.id, date="2025-02-01")
        listed = fixed_ledger.list(
            user.id, ExpenseFilter(from_date=date(2025, 1, 1), to_date=date(2025, 1, 31))
        )
        assert [e.id for e in listed] == [last.id, first.id]

    def test_order_newest_first_ties_by_insertion(self, fixed_ledger, make_user):
        user = make_user()
        old = _create(fixed_ledger, user.id, date="2025-01-01")
        first_today = _create(fixed_ledger, user.id)
        second_today = _create(fixed_ledger, user.id)
        listed = fixed_ledger.list(user.id)
        assert [e.id for e in listed] == [first_today.id, second_today.id, old.id]

    def test_listing_is_repeatable(self, fixed_ledger, make_user):
        user = make_user()
        for days in (3, 0, 3, 10):
            _create(fixed_ledger, user.id, date=TODAY - timedelta(days=days))
        assert fixed_ledger.list(user.id, ExpenseFilter()) == fixed_ledger.list(
            user.id, ExpenseFilter()
        )
