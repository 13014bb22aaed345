import pytest

from lumina_cli.cli import main
from lumina_core.services import FinanceContext


@pytest.fixture
def run(tmp_path, capsys):
    data_dir = tmp_path / "cli-data"

    def _run(*argv):
        code = main(["--data-dir", str(data_dir), *argv])
        captured = capsys.readouterr()
        return code, captured.out, captured.err

    _run.data_dir = data_dir
    return _run


@pytest.fixture
def onboarded_run(run):
    code, _, _ = run("onboard", "Ada", "usd", "1000")
    assert code == 0
    return run


class TestOnboardingGate:
    def test_ledger_commands_need_onboarding(self, run):
        code, _, err = run("summary")
        assert code == 1
        assert "onboard" in err

    def test_currencies_available_before_onboarding(self, run):
        code, out, _ = run("currencies")
        assert code == 0
        assert "EUR" in out

    def test_onboard(self, run):
        code, out, _ = run("onboard", "Ada", "eur", "1234.5")
        assert code == 0
        assert "Welcome, Ada!" in out
        assert "€1.234,50" in out
        profile = FinanceContext.open(run.data_dir).profile
        assert profile.is_onboarded
        assert profile.currency == "EUR"

    def test_onboard_with_unparseable_balance_uses_zero(self, run):
        code, _, _ = run("onboard", "Ada", "USD", "lots")
        assert code == 0
        assert FinanceContext.open(run.data_dir).profile.initial_balance == 0

    def test_onboard_rejects_unknown_currency(self, run):
        with pytest.raises(SystemExit):
            run("onboard", "Ada", "XYZ", "10")


class TestTransactions:
    def test_add_list_delete(self, onboarded_run):
        code, out, _ = onboarded_run("tx", "add", "expense", "12.5", "Food", "--note", "lunch")
        assert code == 0
        assert "-$12.50" in out

        context = FinanceContext.open(onboarded_run.data_dir)
        (transaction,) = context.ledger.all()

        code, out, _ = onboarded_run("tx", "list")
        assert transaction.id in out
        assert "lunch" in out

        code, out, _ = onboarded_run("tx", "delete", transaction.id)
        assert code == 0
        assert FinanceContext.open(onboarded_run.data_dir).ledger.all() == []

    def test_category_defaults_by_type(self, onboarded_run):
        onboarded_run("tx", "add", "income", "50")
        (transaction,) = FinanceContext.open(onboarded_run.data_dir).ledger.all()
        assert transaction.category == "Salary"

    def test_list_empty(self, onboarded_run):
        _, out, _ = onboarded_run("tx", "list")
        assert "No transactions found." in out

    def test_list_rejects_negative_limit(self, onboarded_run):
        onboarded_run("tx", "add", "expense", "1", "Food")
        code, _, err = onboarded_run("tx", "list", "--limit", "-1")
        assert code == 1
        assert "limit cannot be negative" in err

    def test_rejects_non_positive_amount(self, onboarded_run):
        with pytest.raises(SystemExit):
            onboarded_run("tx", "add", "expense", "0", "Food")

    def test_summary(self, onboarded_run):
        onboarded_run("tx", "add", "income", "500", "Salary")
        onboarded_run("tx", "add", "expense", "200", "Food")
        code, out, _ = onboarded_run("summary")
        assert code == 0
        assert "Net worth: $1,300.00" in out
        assert "This month income: $500.00" in out
        assert "This month expense: $200.00" in out

    def test_breakdown(self, onboarded_run):
        onboarded_run("tx", "add", "expense", "10", "Food")
        onboarded_run("tx", "add", "expense", "5", "Food")
        onboarded_run("tx", "add", "expense", "20", "Transport")
        _, out, _ = onboarded_run("breakdown", "expense")
        lines = out.strip().splitlines()
        assert lines[0] == "Total expense: $35.00"
        assert lines[1].strip().startswith("Transport: $20.00")
        assert "2 items" in lines[2]


class TestBudget:
    def test_no_budget_by_default(self, onboarded_run):
        _, out, _ = onboarded_run("budget", "show")
        assert "No budget set." in out

    def test_overspent_budget_is_clamped(self, onboarded_run):
        onboarded_run("tx", "add", "expense", "150", "Food")
        code, out, _ = onboarded_run("budget", "set", "100")
        assert code == 0
        assert "Used: 100%" in out
        assert "Remaining: $0.00" in out

    def test_unparseable_budget_disables_it(self, onboarded_run):
        onboarded_run("budget", "set", "100")
        _, out, _ = onboarded_run("budget", "set", "abc")
        assert "No budget set." in out


class TestProfileAndReset:
    def test_profile_update(self, onboarded_run):
        code, out, _ = onboarded_run("profile", "update", "--theme", "light", "--name", "Grace")
        assert code == 0
        assert "Name: Grace" in out
        assert "Theme: light" in out

    def test_image_avatar_is_not_printed(self, onboarded_run):
        payload = "data:image/png;base64," + "A" * 40
        _, out, _ = onboarded_run("profile", "update", "--avatar", payload)
        assert "Avatar: (image)" in out
        assert payload not in out

    def test_categories_lists_custom_ones(self, onboarded_run):
        onboarded_run("tx", "add", "expense", "3", "Pets")
        _, out, _ = onboarded_run("categories", "--type", "expense")
        assert "Food" in out
        assert "Custom: Pets" in out

    def test_reset_requires_confirmation(self, onboarded_run):
        code, _, err = onboarded_run("reset")
        assert code == 1
        assert "--yes" in err
        assert FinanceContext.open(onboarded_run.data_dir).profile.is_onboarded

    def test_reset(self, onboarded_run):
        onboarded_run("tx", "add", "expense", "3", "Food")
        code, _, _ = onboarded_run("reset", "--yes")
        assert code == 0
        context = FinanceContext.open(onboarded_run.data_dir)
        assert not context.profile.is_onboarded
        assert context.ledger.all() == []
