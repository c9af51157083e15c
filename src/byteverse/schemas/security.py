"""Schemas for the admin security console."""

from pydantic import BaseModel, Field

from byteverse.services.abuse import ActivityState, BlockReason


class BlockEntryResponse(BaseModel):
    address: str
    reason: BlockReason
    blocked_seconds_ago: float
    expires_in_seconds: float | None = Field(
        None, description="Seconds until the block lapses; null for permanent blocks"
    )


class BlocklistResponse(BaseModel):
    success: bool = True
    count: int
    entries: list[BlockEntryResponse]


class BlockRequest(BaseModel):
    address: str = Field(..., min_length=1, max_length=64)
    ttl_seconds: float | None = Field(
        None, ge=0, description="Override the default TTL; 0 blocks permanently"
    )


class SourceActivityResponse(BaseModel):
    address: str
    state: ActivityState
    count: int
    distinct_endpoints: int
    first_seen_seconds_ago: float
    last_seen_seconds_ago: float


class ActivityResponse(BaseModel):
    success: bool = True
    count: int
    records: list[SourceActivityResponse]


class SweepResponse(BaseModel):
    success: bool = True
    evicted_records: int
    expired_blocks: int
