"""
Movement, cart and push channel models for the logistics cart client.

Field names follow the backend's wire format (Portuguese column names), so
payloads can be validated without an alias layer:

- Movement: one row of GET /movimentacoes. Every field is optional and unknown
  columns are kept, since the movement table renders whatever the backend sends.
- CartItem: a movement that belongs to a cart; the numeric id is required.
- ProductRecord: the single record returned by POST /buscar_produto.

Inbound push channel events are plain dataclasses forming a small union
(CartUpdated | ChannelError) so the reconciler can consume them without
knowing anything about the transport.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

# Socket.IO event names used by the realtime backend
EVENT_ADD_ITEM = "adicionar_produto"
EVENT_CART_UPDATED = "carrinho_atualizado"
EVENT_ERROR = "erro"


class Movement(BaseModel):
    """A stock movement row as returned by the movement search."""
    id: Optional[int] = Field(None, description="Movement identifier")
    quantidade: Optional[Union[int, float]] = Field(None, description="Moved quantity")
    tipo_movimento: Optional[str] = Field(None, description="Movement type")
    data_entrada: Optional[str] = Field(None, description="Entry timestamp as sent by the backend")
    material: Optional[str] = Field(None, description="Material code")
    ean: Optional[str] = Field(None, description="EAN barcode")
    texto_breve_material: Optional[str] = Field(None, description="Short material description")
    descricao_fornecedor_principal: Optional[str] = Field(None, description="Primary supplier description")

    model_config = ConfigDict(
        extra="allow",
        coerce_numbers_to_str=True,  # EAN and material codes often arrive as numbers
    )


class CartItem(Movement):
    """A movement held in a cart. Only the identifier is mandatory."""
    id: int = Field(..., description="Movement identifier")

    model_config = ConfigDict(
        extra="allow",
        coerce_numbers_to_str=True,
        frozen=True,
        json_schema_extra={
            "example": {
                "id": 1,
                "material": "8517681",
                "quantidade": 5,
                "tipo_movimento": "entrada",
            }
        },
    )


class ProductRecord(BaseModel):
    """Product returned by a lookup on material code or EAN."""
    cod_material: Optional[str] = Field(None, description="Material code")
    ean: Optional[str] = Field(None, description="EAN barcode")
    texto_breve_material: Optional[str] = Field(None, description="Short material description")
    descricao_fornecedor_principal: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("descricao_fornecedor_principal", "descricao"),
        description="Primary supplier description (some backends send it as 'descricao')",
    )

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True, populate_by_name=True)


def parse_movements(raw: Any) -> List[Movement]:
    """Validate a movement search response; anything but a list yields []."""
    if not isinstance(raw, list):
        return []
    rows: List[Movement] = []
    for entry in raw:
        if not isinstance(entry, dict):
            continue
        try:
            rows.append(Movement(**entry))
        except ValidationError as e:
            logger.warning("Dropping malformed movement row: %s", e)
    return rows


def parse_cart_items(raw: Any) -> List[CartItem]:
    """
    Validate a list of cart items coming from the backend.

    Args:
        raw: Decoded JSON value (expected to be a list of dicts)

    Returns:
        List of CartItem. A missing or non-list value gives an empty list;
        individual rows that fail validation (e.g. no id) are dropped.
    """
    if not isinstance(raw, list):
        return []
    items: List[CartItem] = []
    for entry in raw:
        if not isinstance(entry, dict):
            logger.warning("Dropping non-object cart entry: %r", entry)
            continue
        try:
            items.append(CartItem(**entry))
        except ValidationError as e:
            logger.warning("Dropping malformed cart item: %s", e)
    return items


@dataclass(frozen=True)
class CartUpdated:
    """Broadcast carrying the full cart contents for one session key."""
    session_key: Optional[str]
    items: Tuple[CartItem, ...] = ()

    @classmethod
    def from_payload(cls, payload: Any) -> "CartUpdated":
        """Build the event from a carrinho_atualizado payload, tolerating junk."""
        if not isinstance(payload, dict):
            return cls(session_key=None)
        key = payload.get("chave")
        return cls(
            session_key=key if isinstance(key, str) else None,
            items=tuple(parse_cart_items(payload.get("produtos"))),
        )


@dataclass(frozen=True)
class ChannelError:
    """Application error reported by the backend over the push channel."""
    message: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Any) -> "ChannelError":
        if isinstance(payload, dict):
            message = payload.get("mensagem")
            if isinstance(message, str) and message:
                return cls(message=message)
        return cls()


InboundEvent = Union[CartUpdated, ChannelError]


@dataclass(frozen=True)
class AddItemCommand:
    """Outbound request asking the server to add a movement to a cart."""
    item_id: int
    session_key: str
    event: str = field(default=EVENT_ADD_ITEM, init=False)

    def to_payload(self) -> Dict[str, Any]:
        return {"id": self.item_id, "chave": self.session_key}
