from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from monopoly_deal.cards import PropertyColor
from monopoly_deal.targets import (
    ActionResponse,
    AsBank,
    ChargeRent,
    ChooseColor,
    ChoosePlayer,
    PlayTarget,
    StealOne,
    StealSet,
    Swap,
)


class PlayerRequest(BaseModel):
    token: str


class CreateRoomRequest(BaseModel):
    player_name: str = Field(min_length=1, max_length=32)


class JoinRoomRequest(BaseModel):
    player_name: str = Field(min_length=1, max_length=32)


class ChatRequest(BaseModel):
    token: str
    message: str = Field(min_length=1)


class RoomJoinedResponse(BaseModel):
    room_code: str
    player_id: str
    # secret for this seat; sent back on every request that acts as the player
    token: str


# ---- Play targets ----
# One model per target shape, selected by `kind`.


class BankTargetModel(BaseModel):
    kind: Literal["bank"] = "bank"

    def to_target(self) -> PlayTarget:
        return AsBank()


class ColorTargetModel(BaseModel):
    kind: Literal["color"] = "color"
    color: PropertyColor

    def to_target(self) -> PlayTarget:
        return ChooseColor(self.color)


class PlayerTargetModel(BaseModel):
    kind: Literal["player"] = "player"
    player_id: str

    def to_target(self) -> PlayTarget:
        return ChoosePlayer(self.player_id)


class RentTargetModel(BaseModel):
    kind: Literal["rent"] = "rent"
    color: PropertyColor
    player_id: Optional[str] = None
    double_rent_card_id: Optional[str] = None

    def to_target(self) -> PlayTarget:
        return ChargeRent(self.color, self.player_id, self.double_rent_card_id)


class StealOneTargetModel(BaseModel):
    kind: Literal["steal_one"] = "steal_one"
    player_id: str
    color: PropertyColor

    def to_target(self) -> PlayTarget:
        return StealOne(self.player_id, self.color)


class SwapTargetModel(BaseModel):
    kind: Literal["swap"] = "swap"
    player_id: str
    color: PropertyColor
    give_color: PropertyColor
    give_card_id: str

    def to_target(self) -> PlayTarget:
        return Swap(self.player_id, self.color, self.give_color, self.give_card_id)


class StealSetTargetModel(BaseModel):
    kind: Literal["steal_set"] = "steal_set"
    player_id: str
    color: PropertyColor

    def to_target(self) -> PlayTarget:
        return StealSet(self.player_id, self.color)


TargetModel = Annotated[
    Union[
        BankTargetModel,
        ColorTargetModel,
        PlayerTargetModel,
        RentTargetModel,
        StealOneTargetModel,
        SwapTargetModel,
        StealSetTargetModel,
    ],
    Field(discriminator="kind"),
]


class PlayCardRequest(BaseModel):
    token: str
    card_id: str
    target: Optional[TargetModel] = None


class RespondRequest(BaseModel):
    token: str
    accept: bool = True
    use_refusal: bool = False
    payment_card_ids: List[str] = Field(default_factory=list)
    surrender_card_ids: List[str] = Field(default_factory=list)

    def to_response(self) -> ActionResponse:
        return ActionResponse(
            accept=self.accept,
            use_refusal=self.use_refusal,
            payment_card_ids=list(self.payment_card_ids),
            surrender_card_ids=list(self.surrender_card_ids),
        )


class DiscardRequest(BaseModel):
    token: str
    card_ids: List[str]


class RearrangeRequest(BaseModel):
    token: str
    card_id: str
    from_color: PropertyColor
    to_color: PropertyColor


class SnapshotResponse(BaseModel):
    room_code: str
    snapshot: Dict[str, Any]


class LegalActionsResponse(BaseModel):
    room_code: str
    player_id: str
    actions: List[Dict[str, Any]]
