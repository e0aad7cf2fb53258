"""Data models for the chatWithYourMysqlDb action."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from mysqlchat.core.config import settings


class QueryRequest(BaseModel):
    """Question handed to the SQL synthesizer."""

    question: str = Field(..., min_length=1)
    schema_description: Optional[str] = None
    row_cap: int = Field(100, ge=1)


class MySQLConnectionParams(BaseModel):
    """Connection details for a single request-scoped MySQL session."""

    host: str
    port: int = 3306
    user: str
    password: str = Field(..., repr=False)
    database: str
    ssl_ca: str = Field(..., repr=False, description="CA certificate (PEM text)")


class ChatWithDbInput(BaseModel):
    """Input record of the chatWithYourMysqlDb action.

    Wire keys keep the plugin's camelCase parameter names; numeric fields
    accept either integers or numeric strings.
    """

    model_config = ConfigDict(populate_by_name=True)

    openai_api_key: str = Field(
        ...,
        alias="openaiApiKey",
        title="OpenAI API Key",
        description="Your OpenAI API key",
        repr=False,
    )
    host: str = Field(
        ...,
        title="Database Host",
        description="MySQL database host (e.g., your-server.mysql.database.azure.com)",
    )
    port: int = Field(
        default_factory=lambda: settings.MYSQL_DEFAULT_PORT,
        title="Database Port",
        description="MySQL database port (default: 3306)",
        ge=1,
        le=65535,
    )
    ssl_cert: str = Field(
        ...,
        alias="sslCert",
        title="SSL Certificate",
        description="SSL certificate content (PEM format)",
        repr=False,
    )
    user: str = Field(
        ...,
        title="Database User",
        description="MySQL database user (should use read-only credentials)",
    )
    password: str = Field(
        ...,
        title="Database Password",
        description="MySQL database password",
        repr=False,
    )
    database: str = Field(
        ...,
        title="Database Name",
        description="MySQL database name",
    )
    schema_description: Optional[str] = Field(
        None,
        alias="schema",
        title="Database Schema",
        description="Description of your database schema including table relationships and column descriptions",
    )
    instructions: Optional[str] = Field(
        None,
        title="Instructions",
        description="Optional instructions for processing the response",
    )
    max_rows: int = Field(
        default_factory=lambda: settings.NLQ_DEFAULT_MAX_ROWS,
        alias="maxRows",
        title="Maximum Rows",
        description="Maximum number of rows to return (default: 100)",
        ge=1,
    )
    question: str = Field(
        ...,
        title="Question",
        description="Your database question in natural language",
        min_length=1,
    )

    @field_validator("port", "max_rows", mode="before")
    @classmethod
    def _blank_means_default(cls, value: Any, info: ValidationInfo) -> Any:
        """Treat empty strings and nulls as 'not supplied'."""
        if value is None or (isinstance(value, str) and not value.strip()):
            if info.field_name == "port":
                return settings.MYSQL_DEFAULT_PORT
            return settings.NLQ_DEFAULT_MAX_ROWS
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("question")
    @classmethod
    def _question_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("question must not be blank")
        return value

    def to_query_request(self) -> QueryRequest:
        """Build the synthesizer request from this input."""
        return QueryRequest(
            question=self.question,
            schema_description=self.schema_description,
            row_cap=self.max_rows,
        )

    def to_connection_params(self) -> MySQLConnectionParams:
        """Build the MySQL connection parameters from this input."""
        return MySQLConnectionParams(
            host=self.host,
            port=self.port,
            user=self.user,
            password=self.password,
            database=self.database,
            ssl_ca=self.ssl_cert,
        )


class ChatWithDbOutput(BaseModel):
    """Output record of the chatWithYourMysqlDb action."""

    response: str = Field(
        ...,
        title="Response",
        description="The answer to your database question",
    )


class ActionRunRequest(BaseModel):
    """Request body for running an action."""

    input: ChatWithDbInput


class ActionRunResponse(BaseModel):
    """Response body for a successful action run."""

    output: ChatWithDbOutput


class ActionParameter(BaseModel):
    """Metadata of one action input or output parameter."""

    key: str
    name: str
    description: str
    type: str = "string"
    required: bool


class ActionDefinition(BaseModel):
    """Metadata of one plugin action."""

    key: str
    name: str
    description: str
    type: str
    input_parameters: list[ActionParameter] = Field(..., serialization_alias="inputParameters")
    output_parameters: list[ActionParameter] = Field(..., serialization_alias="outputParameters")


class PluginDefinition(BaseModel):
    """Metadata of the plugin and its actions."""

    name: str
    description: str
    actions: list[ActionDefinition]
