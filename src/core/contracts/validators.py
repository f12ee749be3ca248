"""
JSON Schema Contract Validators

Модуль для валидации экспортированных снапшотов состояния контрактов
согласно формальным JSON Schema контрактам. Использует библиотеку
jsonschema для проверки соответствия данных схемам.

Схемы:
- token_state.json (SpaceToken)
- pool_state.json (LiquidityPool)
- ico_state.json (ICO)

Данные — результат `snapshot().model_dump(mode="json")`: суммы u256
представлены десятичными строками.
"""

import json
from pathlib import Path
from typing import Any, Dict, Type, Union

import jsonschema
from jsonschema import Draft202012Validator
from pydantic import BaseModel

from src.core.domain import IcoSnapshot, PoolSnapshot, TokenSnapshot


# =============================================================================
# SCHEMA LOADER
# =============================================================================


class SchemaLoader:
    """
    Загрузчик JSON Schema файлов.

    Автоматически находит схемы в contracts/schema/ относительно корня проекта.
    """

    def __init__(self):
        # Корень проекта: 4 уровня вверх от этого файла
        self._schema_dir = Path(__file__).parent.parent.parent.parent / "contracts" / "schema"
        if not self._schema_dir.exists():
            raise RuntimeError(f"Schema directory not found: {self._schema_dir}")

        self._schemas: Dict[str, Dict[str, Any]] = {}

    def load_schema(self, schema_name: str) -> Dict[str, Any]:
        """
        Загрузка JSON Schema файла.

        Args:
            schema_name: Имя схемы без расширения (например, 'pool_state')

        Returns:
            Загруженная схема как dict

        Raises:
            FileNotFoundError: Если файл схемы не найден
            ValueError: Если схема не проходит meta-validation
        """
        if schema_name in self._schemas:
            return self._schemas[schema_name]

        schema_path = self._schema_dir / f"{schema_name}.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")

        with open(schema_path, "r", encoding="utf-8") as f:
            schema = json.load(f)

        try:
            Draft202012Validator.check_schema(schema)
        except jsonschema.SchemaError as e:
            raise ValueError(f"Invalid JSON Schema in {schema_name}.json: {e}")

        self._schemas[schema_name] = schema
        return schema


_SCHEMA_LOADER = SchemaLoader()


# =============================================================================
# CONTRACT VALIDATORS
# =============================================================================


class ContractValidator:
    """Валидация данных против одной JSON Schema."""

    def __init__(self, schema_name: str):
        self.schema_name = schema_name
        self.schema = _SCHEMA_LOADER.load_schema(schema_name)
        self.validator = Draft202012Validator(self.schema)

    def validate(self, data: Dict[str, Any]) -> None:
        """
        Raises:
            ValidationError: Если данные не соответствуют схеме
        """
        self.validator.validate(data)

    def is_valid(self, data: Dict[str, Any]) -> bool:
        return self.validator.is_valid(data)


class TokenStateValidator(ContractValidator):
    def __init__(self):
        super().__init__("token_state")


class PoolStateValidator(ContractValidator):
    def __init__(self):
        super().__init__("pool_state")


class IcoStateValidator(ContractValidator):
    def __init__(self):
        super().__init__("ico_state")


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def validate_token_state(data: Dict[str, Any]) -> None:
    """
    Валидация token_state данных.

    Raises:
        ValidationError: Если данные не соответствуют схеме
    """
    TokenStateValidator().validate(data)


def validate_pool_state(data: Dict[str, Any]) -> None:
    """
    Валидация pool_state данных.

    Raises:
        ValidationError: Если данные не соответствуют схеме
    """
    PoolStateValidator().validate(data)


def validate_ico_state(data: Dict[str, Any]) -> None:
    """
    Валидация ico_state данных.

    Raises:
        ValidationError: Если данные не соответствуют схеме
    """
    IcoStateValidator().validate(data)


# =============================================================================
# EXPORT
# =============================================================================


_SNAPSHOT_SCHEMAS: Dict[Type[BaseModel], str] = {
    TokenSnapshot: "token_state",
    PoolSnapshot: "pool_state",
    IcoSnapshot: "ico_state",
}


def export_snapshot(snapshot: Union[TokenSnapshot, PoolSnapshot, IcoSnapshot]) -> Dict[str, Any]:
    """
    Экспорт снапшота в JSON-совместимый dict с проверкой по его схеме.

    Args:
        snapshot: Снапшот контракта (pydantic модель)

    Returns:
        `snapshot.model_dump(mode="json")`, прошедший валидацию

    Raises:
        TypeError: Если для типа снапшота нет схемы
        ValidationError: Если экспорт не соответствует схеме
    """
    schema_name = _SNAPSHOT_SCHEMAS.get(type(snapshot))
    if schema_name is None:
        raise TypeError(f"No state schema for {type(snapshot).__name__}")

    data = snapshot.model_dump(mode="json")
    ContractValidator(schema_name).validate(data)
    return data
