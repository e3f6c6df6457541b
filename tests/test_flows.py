from amounts import Breakdown, Flat
from domain import Account, Category, FlowRule, FlowRules, Ledger, MonthlyData, Transfer
from flows import AccountFlow, FlowKind, NodeType, account_flows, sankey


def make_ledger() -> Ledger:
    return Ledger(
        accounts=(
            Account(id="account", name="Checking"),
            Account(id="save", name="Savings"),
            Account(id="pool", name="Pool"),
        ),
        income_categories=(
            Category(id="salary", name="Salary"),
            Category(id="bonus", name="Bonus"),
        ),
        expense_categories=(
            Category(id="food", name="Food"),
            Category(id="travel", name="Travel"),
            Category(id="rent", name="Rent"),
        ),
        flow_rules=FlowRules(expense={"travel": FlowRule(from_account="pool")}),
        months={
            "2024-03": MonthlyData(
                month="2024-03",
                income={"salary": Flat(300_000)},
                expense={
                    "food": Breakdown({"groceries": 30_000, "restaurants": 20_000}),
                    "travel": Flat(10_000),
                },
                transfers=(Transfer("account", "pool", 20_000, "trip"),),
            ),
        },
    )


def test_account_flows_cover_every_movement() -> None:
    flows = account_flows(make_ledger(), "2024-03")

    assert flows == [
        AccountFlow("income", "account", 300_000, "income"),
        AccountFlow("account", "pool", 20_000, "transfer", "trip"),
        AccountFlow("account", "expense", 50_000, "expense"),
        AccountFlow("pool", "expense", 10_000, "expense"),
        AccountFlow("account", "save", 230_000, "settlement"),
        AccountFlow("pool", "save", 10_000, "pool_reset"),
    ]


def test_deficit_settlement_flows_from_savings() -> None:
    ledger = Ledger(
        accounts=(Account(id="account", name="Checking"), Account(id="save", name="Savings")),
        months={"2024-05": MonthlyData(month="2024-05", expense={"rent": Flat(80_000)})},
    )
    flows = account_flows(ledger, "2024-05")
    assert flows[-1] == AccountFlow("save", "account", 80_000, "settlement")


def test_sankey_links_and_drops_unlinked_nodes() -> None:
    data = sankey(make_ledger(), "2024-03")

    links = {(link.source, link.target): link.value for link in data.links}
    assert links == {
        ("income-salary", "account-account"): 300_000,
        ("account-account", "expense-food"): 50_000,
        ("account-pool", "expense-travel"): 10_000,
        ("account-account", "account-pool"): 20_000,
    }
    assert [node.id for node in data.nodes] == [
        "income-salary",
        "account-account",
        "account-pool",
        "expense-food",
        "expense-travel",
    ]


def test_sankey_for_empty_month() -> None:
    data = sankey(make_ledger(), "2024-04")
    assert data.nodes == []
    assert data.links == []


def test_flow_kinds_and_node_types_are_enums() -> None:
    ledger = make_ledger()
    kinds = [flow.kind for flow in account_flows(ledger, "2024-03")]
    assert all(isinstance(kind, FlowKind) for kind in kinds)
    assert kinds[-1] is FlowKind.pool_reset

    types = {node.id: node.type for node in sankey(ledger, "2024-03").nodes}
    assert types["income-salary"] is NodeType.income
    assert types["account-pool"] is NodeType.account
    assert types["expense-travel"] is NodeType.expense
