"""
CLI tests.

Verifies:
- Commands print PASS lines on success
- Typed failures print FAIL and exit with status 1
- Listings support --json
- sales make shows the product list before asking for a product
"""

import json

import pytest
from click.testing import CliRunner

from shopmgr.cli import cli


CLEAN_ENV = {
    "SHOPMGR_BCRYPT_ROUNDS": "4",
    "SHOPMGR_USER": None,
    "SHOPMGR_PASSWORD": None,
    "SHOPMGR_DATA_DIR": None,
    "SHOPMGR_LOG_DIR": None,
    "SHOPMGR_LOG_LEVEL": None,
    "SHOPMGR_RECORD_FORMAT": None,
}


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def data_dir(tmp_path):
    return tmp_path / "shop"


@pytest.fixture
def invoke(runner, data_dir):
    def _invoke(*args, user="admin", password="admin", input=None):
        base = ["--data-dir", str(data_dir)]
        if user is not None:
            base += ["--user", user, "--password", password]
        return runner.invoke(cli, base + list(args), input=input, env=CLEAN_ENV)
    return _invoke


@pytest.fixture
def initialized(invoke):
    result = invoke("system", "init", user=None)
    assert result.exit_code == 0, result.output
    return invoke


@pytest.fixture
def with_mouse(initialized):
    result = initialized(
        "products", "add",
        "--name", "Mouse", "--category", "Peripherals", "--brand", "Logi",
        "--cost-price", "5.00", "--sell-price", "10.00", "--stock", "20", "--min-stock", "5",
    )
    assert result.exit_code == 0, result.output
    return initialized


@pytest.fixture
def with_alice(with_mouse):
    result = with_mouse(
        "customers", "add",
        "--name", "Alice", "--phone", "555-0100", "--email", "alice@example.com",
        "--address", "1 Main St, Springfield",
    )
    assert result.exit_code == 0, result.output
    return with_mouse


class TestSystemCommands:

    def test_init_creates_default_admin(self, invoke, data_dir):
        result = invoke("system", "init", user=None)
        assert result.exit_code == 0
        assert "PASS Created default administrator: admin (ID: 1)" in result.output
        assert (data_dir / "users.csv").exists()

        again = invoke("system", "init", user=None)
        assert again.exit_code == 0
        assert "WARN" in again.output

    def test_bad_login_fails(self, initialized):
        result = initialized("products", "list", password="wrong")
        assert result.exit_code == 1
        assert "FAIL Invalid username or password" in result.output

    def test_prompts_for_credentials(self, initialized):
        result = initialized("products", "list", user=None, input="admin\nadmin\n")
        assert result.exit_code == 0, result.output
        assert "No products found." in result.output

    def test_backup(self, with_mouse, data_dir):
        result = with_mouse("system", "backup")
        assert result.exit_code == 0, result.output
        backups = list((data_dir / "backups").iterdir())
        assert len(backups) == 1
        assert (backups[0] / "products.csv").exists()

    def test_passwd(self, initialized):
        result = initialized("system", "passwd", "--old-password", "admin", "--new-password", "n3wpass")
        assert result.exit_code == 0, result.output
        assert initialized("products", "list", password="admin").exit_code == 1
        assert initialized("products", "list", password="n3wpass").exit_code == 0


class TestProductCommands:

    def test_add_and_list_json(self, with_mouse):
        result = with_mouse("products", "list", "--json")
        assert result.exit_code == 0, result.output
        products = json.loads(result.output)
        assert products == [{
            "id": 1,
            "name": "Mouse",
            "category": "Peripherals",
            "brand": "Logi",
            "cost_price": "5.00",
            "sell_price": "10.00",
            "stock": 20,
            "min_stock_level": 5,
        }]

    def test_invalid_price_fails(self, initialized):
        result = initialized(
            "products", "add",
            "--name", "Pad", "--category", "Acc", "--brand", "Acme",
            "--cost-price", "5", "--sell-price", "4", "--stock", "1", "--min-stock", "0",
        )
        assert result.exit_code == 1
        assert "FAIL sell_price must be >= cost_price" in result.output

    def test_out_of_range_price_fails_cleanly(self, initialized):
        result = initialized(
            "products", "add",
            "--name", "Pad", "--category", "Acc", "--brand", "Acme",
            "--cost-price", "1e30", "--sell-price", "1e30", "--stock", "1", "--min-stock", "0",
        )
        assert result.exit_code == 1
        assert "FAIL cost_price is out of range" in result.output

    def test_restock_and_adjust(self, with_mouse):
        assert "stock is now 25" in with_mouse("products", "restock", "1", "5").output
        result = with_mouse("products", "adjust", "1", "--delta=-30")
        assert result.exit_code == 0, result.output
        assert "stock is now 0" in result.output

    def test_search(self, with_mouse):
        result = with_mouse("products", "search", "Logi")
        assert result.exit_code == 0
        assert "Mouse" in result.output


class TestSalesCommands:

    def test_make_sale(self, with_alice):
        result = with_alice("sales", "make", "--product-id", "1", "--customer-id", "1", "--quantity", "3")
        assert result.exit_code == 0, result.output
        assert "total 30.00" in result.output

        sales = json.loads(with_alice("sales", "list", "--json").output)
        assert sales[0]["quantity"] == 3
        assert sales[0]["cashier"] == "admin"

    def test_oversize_sale_fails(self, with_alice):
        result = with_alice("sales", "make", "--product-id", "1", "--customer-id", "1", "--quantity", "21")
        assert result.exit_code == 1
        assert "FAIL Insufficient stock" in result.output

    def test_sale_with_new_customer(self, with_mouse):
        result = with_mouse(
            "sales", "make", "--product-id", "1", "--customer-id", "0", "--quantity", "1",
            input="Carol\n555-0199\ncarol@example.com\n9 Oak Rd\n",
        )
        assert result.exit_code == 0, result.output
        customers = json.loads(with_mouse("customers", "list", "--json").output)
        assert customers[0]["name"] == "Carol"

    def test_cashier_picks_from_product_list(self, with_alice):
        added = with_alice("users", "add", "--username", "carl", "--new-password", "carlpass", "--role", "cashier")
        assert added.exit_code == 0, added.output

        result = with_alice(
            "sales", "make", "--customer-id", "1", "--quantity", "2",
            user="carl", password="carlpass", input="1\n",
        )
        assert result.exit_code == 0, result.output
        assert result.output.index("Mouse") < result.output.index("Product ID")
        assert "Cost" not in result.output
        assert "total 20.00" in result.output


class TestReportCommands:

    def test_summary_json(self, with_alice):
        with_alice("sales", "make", "--product-id", "1", "--customer-id", "1", "--quantity", "2")
        result = with_alice("reports", "summary", "--json")
        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == {
            "transactions": 1,
            "units_sold": 2,
            "revenue": "20.00",
            "average_sale": "20.00",
        }

    def test_profit(self, with_alice):
        with_alice("sales", "make", "--product-id", "1", "--customer-id", "1", "--quantity", "2")
        result = with_alice("reports", "profit")
        assert "Profit Margin: 50.00%" in result.output

    def test_low_stock_threshold(self, with_mouse):
        result = with_mouse("reports", "low-stock", "--threshold", "25")
        assert "Mouse" in result.output


class TestUserCommands:

    def test_cashier_denied_products(self, initialized):
        added = initialized("users", "add", "--username", "carl", "--new-password", "carlpass", "--role", "cashier")
        assert added.exit_code == 0, added.output

        result = initialized("products", "list", user="carl", password="carlpass")
        assert result.exit_code == 1
        assert "FAIL Permission denied: requires MANAGE_PRODUCTS" in result.output

    def test_edit_user(self, initialized):
        initialized("users", "add", "--username", "carl", "--new-password", "carlpass", "--role", "cashier")
        result = initialized("users", "edit", "2", "--perm", "view_reports", "--inactive")
        assert result.exit_code == 0, result.output

        users = json.loads(initialized("users", "list", "--json").output)
        carl = [u for u in users if u["username"] == "carl"][0]
        assert carl["permissions"] == ["VIEW_REPORTS"]
        assert carl["is_active"] is False

    def test_delete_self_fails(self, initialized):
        result = initialized("users", "delete", "1", "--yes")
        assert result.exit_code == 1
        assert "FAIL You cannot delete your own account" in result.output

    def test_delete_declined(self, initialized):
        initialized("users", "add", "--username", "carl", "--new-password", "carlpass")
        result = initialized("users", "delete", "2", input="n\n")
        assert result.exit_code == 0
        assert "cancelled" in result.output


class TestPermissionCatalogue:

    def test_lists_all_codes_without_login(self, invoke):
        result = invoke("users", "perms", user=None)
        assert result.exit_code == 0, result.output
        for code in ("MANAGE_PRODUCTS", "MANAGE_CUSTOMERS", "MANAGE_SALES", "VIEW_REPORTS", "MANAGE_USERS"):
            assert code in result.output
        assert "cashier" in result.output

    def test_filter_by_category(self, invoke):
        result = invoke("users", "perms", "--category", "reports", user=None)
        assert result.exit_code == 0, result.output
        assert "VIEW_REPORTS" in result.output
        assert "MANAGE_USERS" not in result.output.split("Role presets:")[0]
