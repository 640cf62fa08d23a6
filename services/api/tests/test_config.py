from decimal import Decimal

import pytest
from pydantic import ValidationError

from services.api.src.dorkfi.config import Settings


def test_default_collateral_factor(monkeypatch):
    monkeypatch.delenv("COLLATERAL_FACTOR", raising=False)

    assert Settings().collateral_factor == Decimal("0.8")


def test_collateral_factor_from_environment(monkeypatch):
    monkeypatch.setenv("COLLATERAL_FACTOR", "0.75")

    assert Settings().collateral_factor == Decimal("0.75")


@pytest.mark.parametrize("value", ["0", "-0.5", "1.2"])
def test_rejects_collateral_factor_out_of_range(monkeypatch, value):
    monkeypatch.setenv("COLLATERAL_FACTOR", value)

    with pytest.raises(ValidationError):
        Settings()
