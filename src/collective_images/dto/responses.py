"""Response DTOs for the JSON endpoints."""

from pydantic import BaseModel, Field


class CacheStatsResponse(BaseModel):
    """Member cache statistics."""

    total_entries: int = Field(..., description="Number of cached member lists", ge=0)
    max_entries: int = Field(..., description="Cache capacity", ge=1)
    ttl_seconds: float = Field(..., description="Time-to-live of an entry in seconds", ge=0)
    hits: int = Field(0, description="Lookups answered from cache", ge=0)
    misses: int = Field(0, description="Lookups that went upstream", ge=0)


class HealthCheckResponse(BaseModel):
    """Response DTO for health check."""

    status: str = Field(..., description="Health status: 'healthy' or 'unhealthy'")
    cache: CacheStatsResponse = Field(..., description="Member cache statistics")
