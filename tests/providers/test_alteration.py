"""Tests for batching table alterations into ordered steps."""

from dbmatic.models import DmColumn, DmForeignKeyConstraint, DmIndex, ModelValidationError
from dbmatic.providers import AlterationStep, AlterationStepKind, TableAlteration

import pytest


def test_steps_follow_fixed_order():
    """Tests steps come out in application order regardless of how the alteration was written."""
    column = DmColumn(None, "orders", "note", str, is_nullable=True)
    index = DmIndex(None, "orders", "ix_orders_note", ["note"])
    fk = DmForeignKeyConstraint(None, "orders", "fk_orders_customer", ["customer_id"], "customers", ["id"])
    alteration = TableAlteration(
        None,
        "orders",
        new_table_name="purchases",
        add_foreign_key_constraints=[fk],
        add_indexes=[index],
        add_columns=[column],
        rename_columns={"name": "title"},
        drop_columns=["legacy"],
        drop_primary_key=True,
        drop_indexes=["ix_orders_name"],
        drop_foreign_key_constraints=["fk_orders_old"],
    )
    assert list(alteration.steps()) == [
        AlterationStep(AlterationStepKind.DROP_FOREIGN_KEY, "fk_orders_old"),
        AlterationStep(AlterationStepKind.DROP_INDEX, "ix_orders_name"),
        AlterationStep(AlterationStepKind.DROP_PRIMARY_KEY),
        AlterationStep(AlterationStepKind.DROP_COLUMN, "legacy"),
        AlterationStep(AlterationStepKind.RENAME_TABLE, ("orders", "purchases")),
        AlterationStep(AlterationStepKind.RENAME_COLUMN, ("name", "title")),
        AlterationStep(AlterationStepKind.ADD_COLUMN, column),
        AlterationStep(AlterationStepKind.ADD_INDEX, index),
        AlterationStep(AlterationStepKind.ADD_FOREIGN_KEY, fk),
    ]
    assert alteration.target_table_name == "purchases"
    assert not alteration.is_empty()


def test_empty_alteration():
    """Tests an alteration without changes, or renaming a table to its own name, is empty."""
    assert TableAlteration(None, "orders").is_empty()
    alteration = TableAlteration(None, "orders", new_table_name="orders")
    assert alteration.is_empty()
    assert alteration.target_table_name == "orders"


@pytest.mark.parametrize("kwargs", [{"table_name": ""}, {"table_name": "orders", "new_table_name": " "}])
def test_alteration_requires_names(kwargs: dict):
    """Tests an alteration must name its table, and a non-blank new name."""
    with pytest.raises(ModelValidationError):
        TableAlteration(None, **kwargs)
