from __future__ import annotations

import logging
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

logger = logging.getLogger(__name__)

THEMES = ("default", "neutral", "dark", "forest", "base")

DEFAULT_SCRIPT_SRC = "https://cdn.jsdelivr.net/npm/mermaid@11/dist/mermaid.min.js"


class MermaidConfig(BaseModel):
    """Render configuration shared by the fence scanner and the HTML normalizer.

    Fields accept their snake_case names as well as the camelCase option
    names used by Mermaid and by markdown plugin options.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    include_script: bool = Field(
        default=False, validation_alias=AliasChoices("include_script", "includeScript")
    )
    append_bootstrap: bool = Field(
        default=True, validation_alias=AliasChoices("append_bootstrap", "appendBootstrap")
    )
    custom_class: str = Field(
        default="",
        validation_alias=AliasChoices("custom_class", "customClass", "mermaidCustomClass"),
    )
    custom_style: str = Field(
        default="",
        validation_alias=AliasChoices("custom_style", "customStyle", "mermaidCustomStyle"),
    )
    theme: Literal["default", "neutral", "dark", "forest", "base"] = "default"
    security_level: str = Field(
        default="strict", validation_alias=AliasChoices("security_level", "securityLevel")
    )
    font_family: str | None = Field(
        default=None, validation_alias=AliasChoices("font_family", "fontFamily")
    )
    font_size: int | float | None = Field(
        default=None, validation_alias=AliasChoices("font_size", "fontSize")
    )
    flowchart: dict[str, Any] = Field(default_factory=dict)
    sequence: dict[str, Any] = Field(default_factory=dict)
    class_: dict[str, Any] = Field(
        default_factory=dict, validation_alias=AliasChoices("class_", "class")
    )
    git_graph: dict[str, Any] = Field(
        default_factory=dict, validation_alias=AliasChoices("git_graph", "gitGraph")
    )
    server_side: bool = Field(
        default=False, validation_alias=AliasChoices("server_side", "serverSide")
    )
    fallback_to_client_side: bool = Field(
        default=True,
        validation_alias=AliasChoices("fallback_to_client_side", "fallbackToClientSide"),
    )
    keyword: str = Field(default="mermaid", min_length=1)
    base_class: str = Field(
        default="mermaid",
        min_length=1,
        validation_alias=AliasChoices("base_class", "baseClass"),
    )
    highlight_class_prefix: str = Field(
        default="hljs",
        min_length=1,
        validation_alias=AliasChoices("highlight_class_prefix", "highlightClassPrefix"),
    )
    script_src: str = Field(
        default=DEFAULT_SCRIPT_SRC, validation_alias=AliasChoices("script_src", "scriptSrc")
    )

    @model_validator(mode="before")
    @classmethod
    def _bootstrap_follows_include_script(cls, data: Any) -> Any:
        """An explicit ``includeScript`` also sets ``appendBootstrap`` unless that is given."""
        if not isinstance(data, dict):
            return data
        if any(key in data for key in ("append_bootstrap", "appendBootstrap")):
            return data
        for key in ("include_script", "includeScript"):
            if key in data:
                return {**data, "append_bootstrap": data[key]}
        return data

    @field_validator("theme", mode="before")
    @classmethod
    def _fallback_theme(cls, value: object) -> object:
        if value not in THEMES:
            logger.debug("Unknown theme %r, using 'default'", value)
            return "default"
        return value

    @field_validator("custom_class", "custom_style", mode="before")
    @classmethod
    def _none_as_empty(cls, value: object) -> object:
        return "" if value is None else value

    def mermaid_options(self) -> dict[str, Any]:
        """Options for ``mermaid.initialize``, keyed the way Mermaid expects."""
        options: dict[str, Any] = {
            "startOnLoad": False,
            "theme": self.theme,
            "securityLevel": self.security_level,
        }
        if self.font_family:
            options["fontFamily"] = self.font_family
        if self.font_size is not None:
            options["fontSize"] = self.font_size
        for key, value in (
            ("flowchart", self.flowchart),
            ("sequence", self.sequence),
            ("class", self.class_),
            ("gitGraph", self.git_graph),
        ):
            if value:
                options[key] = value
        return options


class BackendConfig(BaseModel):
    """Server-side rendering through mermaid-cli."""

    provider: Literal["mmdc", "none"] = "mmdc"
    command: str = "mmdc"
    timeout: int = Field(default=30, gt=0)
    output_format: Literal["svg"] = "svg"
    extra_args: list[str] = Field(default_factory=list)


class MdMermaidConfig(BaseModel):
    mermaid: MermaidConfig = Field(default_factory=MermaidConfig)
    backend: BackendConfig = Field(default_factory=BackendConfig)
    log_level: Literal["debug", "info", "warn", "error"] = "info"
    log_format: Literal["text", "json"] = "text"
