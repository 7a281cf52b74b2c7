"""Job schemas for the embedding batch pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StrictInt, StrictStr, StringConstraints, field_validator

NonEmptyStr = Annotated[StrictStr, StringConstraints(min_length=1)]


class EmbeddingJob(BaseModel):
    """One queued request to compute and store the embedding of a row.

    Accepts both the canonical camelCase keys and the short keys emitted by
    the queue trigger (``id``, ``schema``, ``table``, ``contentFunction``,
    ``embeddingColumn``). Serialises with the canonical keys.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    job_id: StrictInt = Field(
        ...,
        validation_alias=AliasChoices("jobId", "job_id"),
        serialization_alias="jobId",
    )
    row_id: Union[StrictInt, StrictStr] = Field(
        ...,
        validation_alias=AliasChoices("rowId", "id", "row_id"),
        serialization_alias="rowId",
    )
    schema_name: NonEmptyStr = Field(
        ...,
        validation_alias=AliasChoices("schemaName", "schema", "schema_name"),
        serialization_alias="schemaName",
    )
    table_name: NonEmptyStr = Field(
        ...,
        validation_alias=AliasChoices("tableName", "table", "table_name"),
        serialization_alias="tableName",
    )
    content_function_name: NonEmptyStr = Field(
        ...,
        validation_alias=AliasChoices("contentFunctionName", "contentFunction", "content_function_name"),
        serialization_alias="contentFunctionName",
    )
    embedding_column_name: NonEmptyStr = Field(
        ...,
        validation_alias=AliasChoices("embeddingColumnName", "embeddingColumn", "embedding_column_name"),
        serialization_alias="embeddingColumnName",
    )

    @field_validator("schema_name", "table_name", "content_function_name", "embedding_column_name")
    @classmethod
    def _reject_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must be a non-empty string")
        return value

    @property
    def custom_id(self) -> str:
        """Correlation key sent to the batch provider."""

        return str(self.job_id)

    @property
    def row_ref(self) -> str:
        return f"{self.schema_name}.{self.table_name}/{self.row_id}"


class FailedJob(EmbeddingJob):
    """A job together with the reason it could not be completed."""

    reason: str = Field(..., description="Human readable failure reason")

    @classmethod
    def from_job(cls, job: EmbeddingJob, reason: str) -> "FailedJob":
        return cls.model_validate({**job.model_dump(), "reason": reason})


@dataclass(frozen=True, slots=True)
class EnrichedJob:
    """A job whose content was resolved and is ready for submission."""

    job: EmbeddingJob
    content: str

    @property
    def custom_id(self) -> str:
        return self.job.custom_id


__all__ = ["EmbeddingJob", "FailedJob", "EnrichedJob"]
