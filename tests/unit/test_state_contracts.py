"""
Tests for state snapshots and JSON Schema contracts

Комплексное тестирование снапшотов и JSON Schema валидаторов:
- Валидность самих схем
- Снапшоты живых контрактов проходят валидацию
- Детекция нарушений required полей, типов и pattern
- Инварианты Pydantic моделей (сохранение supply, фазы)
"""

import pytest
from jsonschema import ValidationError
from pydantic import ValidationError as PydanticValidationError

from src.core.contracts import (
    IcoStateValidator,
    PoolStateValidator,
    SchemaLoader,
    TokenStateValidator,
    export_snapshot,
    validate_ico_state,
    validate_pool_state,
    validate_token_state,
)
from src.core.domain import IcoSnapshot, Phase, PoolSnapshot, TokenSnapshot, to_base_units
from src.exchange import deploy_exchange
from src.ico import ICO
from src.ledger import Ledger

CREATOR = "0xc0ffee"
LARRY = "0x1a22y"

ETH = to_base_units(1)


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def ledger():
    ledger = Ledger()
    ledger.fund(CREATOR, 1_000_000 * ETH)
    ledger.fund(LARRY, 1_000 * ETH)
    return ledger


@pytest.fixture
def exchange(ledger):
    return deploy_exchange(ledger, CREATOR, seed_token=500 * ETH, seed_base=100 * ETH)


@pytest.fixture
def ico(ledger):
    ico = ledger.deploy(ICO, CREATOR, whitelist=[LARRY])
    ledger.call(LARRY, ico.buy, value=250 * ETH)
    return ico


@pytest.fixture
def pool_state(exchange):
    return exchange.pool.snapshot().model_dump(mode="json")


@pytest.fixture
def ico_state(ico):
    return ico.snapshot().model_dump(mode="json")


# =============================================================================
# ТЕСТЫ: Схемы
# =============================================================================


class TestSchemaLoader:
    """Загрузка и meta-validation схем."""

    @pytest.mark.parametrize("name", ["token_state", "pool_state", "ico_state"])
    def test_schemas_load(self, name):
        schema = SchemaLoader().load_schema(name)
        assert schema["$schema"] == "https://json-schema.org/draft/2020-12/schema"

    def test_cache(self):
        loader = SchemaLoader()
        assert loader.load_schema("pool_state") is loader.load_schema("pool_state")

    def test_missing_schema(self):
        with pytest.raises(FileNotFoundError):
            SchemaLoader().load_schema("market_state")


# =============================================================================
# ТЕСТЫ: Снапшоты контрактов
# =============================================================================


class TestTokenState:
    """token_state контракт."""

    def test_live_snapshot_valid(self, exchange):
        data = exchange.token.snapshot().model_dump(mode="json")
        validate_token_state(data)
        assert data["total_supply"] == str(500_000 * ETH)
        assert data["symbol"] == "SPC"

    def test_amount_as_number_rejected(self, exchange):
        data = exchange.token.snapshot().model_dump(mode="json")
        data["total_supply"] = 500_000 * ETH
        assert not TokenStateValidator().is_valid(data)

    def test_supply_conservation_enforced(self):
        with pytest.raises(PydanticValidationError):
            TokenSnapshot(
                address="0xtoken",
                name="SpaceToken",
                symbol="SPC",
                decimals=18,
                owner=CREATOR,
                treasury=CREATOR,
                total_supply=100,
                tax_enabled=False,
                tax_bps=200,
                balances={CREATOR: 99},
            )


class TestPoolState:
    """pool_state контракт."""

    def test_live_snapshot_valid(self, pool_state):
        validate_pool_state(pool_state)
        assert pool_state["reserve_base"] == str(100 * ETH)
        assert pool_state["reserve_token"] == str(500 * ETH)

    def test_missing_required(self, pool_state):
        del pool_state["reserve_token"]
        with pytest.raises(ValidationError):
            validate_pool_state(pool_state)

    def test_negative_amount_rejected(self, pool_state):
        pool_state["reserve_base"] = "-1"
        assert not PoolStateValidator().is_valid(pool_state)

    def test_unknown_field_rejected(self, pool_state):
        pool_state["price"] = 5.0
        with pytest.raises(ValidationError):
            validate_pool_state(pool_state)

    def test_json_round_trip(self, exchange):
        snapshot = exchange.pool.snapshot()
        assert PoolSnapshot.model_validate_json(snapshot.model_dump_json()) == snapshot

    def test_frozen(self, exchange):
        snapshot = exchange.pool.snapshot()
        with pytest.raises(PydanticValidationError):
            snapshot.reserve_base = 0

    def test_credit_conservation_enforced(self, pool_state):
        pool_state["total_supply"] = str(int(pool_state["total_supply"]) + 1)
        with pytest.raises(PydanticValidationError):
            PoolSnapshot.model_validate(pool_state)


class TestIcoState:
    """ico_state контракт."""

    def test_live_snapshot_valid(self, ico_state):
        validate_ico_state(ico_state)
        assert ico_state["current_phase"] == 0
        assert ico_state["phase_name"] == "SEED"
        assert ico_state["total_raised"] == str(250 * ETH)
        assert ico_state["whitelist"] == [LARRY]

    def test_phase_out_of_range(self, ico_state):
        ico_state["current_phase"] = 3
        assert not IcoStateValidator().is_valid(ico_state)

    def test_phase_name_mismatch_rejected(self, ico_state):
        ico_state["phase_name"] = "OPEN"
        with pytest.raises(PydanticValidationError):
            IcoSnapshot.model_validate(ico_state)

    def test_total_above_goal_rejected(self, ico_state):
        ico_state["total_raised"] = str(30_001 * ETH)
        with pytest.raises(PydanticValidationError):
            IcoSnapshot.model_validate(ico_state)

    def test_open_phase_snapshot(self, ledger, ico):
        ledger.call(CREATOR, ico.advance_phase, Phase.SEED)
        ledger.call(CREATOR, ico.advance_phase, Phase.GENERAL)
        ledger.call(CREATOR, ico.toggle_is_paused, True)

        data = ico.snapshot().model_dump(mode="json")
        validate_ico_state(data)
        assert data["current_phase"] == 2
        assert data["is_paused"] is True
        assert data["goal_reached"] is False


class TestExportState:
    """Экспорт состояния контрактов через схемы."""

    def test_exchange_export(self, exchange):
        state = exchange.export_state()
        assert set(state) == {"token", "pool"}
        assert state["pool"]["reserve_base"] == str(100 * ETH)
        assert state["token"]["symbol"] == "SPC"

    def test_ico_export(self, ico):
        state = ico.export_state()
        assert state == ico.snapshot().model_dump(mode="json")
        assert state["phase_name"] == "SEED"

    def test_unknown_snapshot_type(self):
        with pytest.raises(TypeError):
            export_snapshot(Phase.SEED)
