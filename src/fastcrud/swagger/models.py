# src/fastcrud/swagger/models.py

"""
[职责] 文档契约层：定义 Schema/Parameter/Operation/PathItem/Tag/Document/RouteDescriptor 结构，并渲染为 Swagger 2.0 dict。
[边界] 不做类型推导与文档组装；仅描述结构与序列化。
[上游关系] introspect/operation/assembler 构造这些对象。
[下游关系] registry 存储 Document；api/routers/swagger.py 输出 to_swagger() 结果。
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fastcrud.utils.constants import DEFINITIONS_REF_PREFIX


SchemaKind = Literal["object", "array", "string", "integer", "number", "boolean"]
ParameterLocation = Literal["path", "body"]
HttpMethod = Literal["GET", "POST", "PUT", "DELETE", "PATCH"]

_PATH_ITEM_METHODS = ("get", "post", "put", "delete", "patch")


class Schema(BaseModel):
    """
    [职责] 类型的结构化描述：原始类型 / 带 properties 的对象 / 带 items 的数组（三者择一），或引用。
    [边界] required 为 properties 键的子集；不做 JSON Schema 校验。
    """

    model_config = ConfigDict(extra="forbid")

    kind: Optional[SchemaKind] = Field(default=None)  # docstring: 序列化为 type
    format: Optional[str] = Field(default=None)  # docstring: int64/double/date-time 等细化
    properties: Optional[Dict[str, "Schema"]] = Field(default=None)
    required: List[str] = Field(default_factory=list)
    items: Optional["Schema"] = Field(default=None)  # docstring: kind=array 时必有
    description: Optional[str] = Field(default=None)
    example: Optional[Any] = Field(default=None)
    ref: Optional[str] = Field(default=None)  # docstring: 序列化为 $ref

    @classmethod
    def reference(cls, name: str) -> "Schema":
        return cls(ref=f"{DEFINITIONS_REF_PREFIX}{name}")

    def to_swagger(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        if self.ref is not None:
            out["$ref"] = self.ref
        if self.kind is not None:
            out["type"] = self.kind
        if self.format is not None:
            out["format"] = self.format
        if self.description is not None:
            out["description"] = self.description
        if self.example is not None:
            out["example"] = self.example
        if self.properties:
            out["properties"] = {name: prop.to_swagger() for name, prop in self.properties.items()}
        if self.required:
            out["required"] = list(self.required)
        if self.items is not None:
            out["items"] = self.items.to_swagger()
        return out


class Parameter(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1)
    location: ParameterLocation = Field(...)  # docstring: 序列化为 in
    description: Optional[str] = Field(default=None)
    required: bool = Field(default=False)
    schema_: Schema = Field(...)  # docstring: body 参数输出 schema；path 参数展开为 type/format

    def to_swagger(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"name": self.name, "in": self.location, "required": self.required}
        if self.description is not None:
            out["description"] = self.description
        if self.location == "body":
            out["schema"] = self.schema_.to_swagger()
        else:
            if self.schema_.kind is not None:
                out["type"] = self.schema_.kind
            if self.schema_.format is not None:
                out["format"] = self.schema_.format
        return out


class ResponseSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    description: str = Field(...)
    schema_: Optional[Schema] = Field(default=None)

    def to_swagger(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"description": self.description}
        if self.schema_ is not None:
            out["schema"] = self.schema_.to_swagger()
        return out


class Operation(BaseModel):
    model_config = ConfigDict(extra="forbid")

    tags: List[str] = Field(default_factory=list)
    summary: Optional[str] = Field(default=None)
    description: Optional[str] = Field(default=None)
    parameters: List[Parameter] = Field(default_factory=list)  # docstring: 有序（path 参数在前）
    responses: Dict[int, ResponseSpec] = Field(default_factory=dict)  # docstring: 允许为空

    def to_swagger(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        if self.tags:
            out["tags"] = list(self.tags)
        if self.summary is not None:
            out["summary"] = self.summary
        if self.description is not None:
            out["description"] = self.description
        if self.parameters:
            out["parameters"] = [p.to_swagger() for p in self.parameters]
        out["responses"] = {str(code): resp.to_swagger() for code, resp in sorted(self.responses.items())}
        return out


class PathItem(BaseModel):
    """HTTP method -> 至多一个 Operation。"""

    model_config = ConfigDict(extra="forbid")

    get: Optional[Operation] = Field(default=None)
    post: Optional[Operation] = Field(default=None)
    put: Optional[Operation] = Field(default=None)
    delete: Optional[Operation] = Field(default=None)
    patch: Optional[Operation] = Field(default=None)

    def set_operation(self, method: str, operation: Operation) -> None:
        key = method.strip().lower()
        if key not in _PATH_ITEM_METHODS:
            raise ValueError(f"unsupported http method: {method}")
        setattr(self, key, operation)  # docstring: 同 method 重复时后写覆盖

    def operations(self) -> Dict[str, Operation]:
        ops: Dict[str, Operation] = {}
        for method in _PATH_ITEM_METHODS:
            op = getattr(self, method)
            if op is not None:
                ops[method] = op
        return ops

    def to_swagger(self) -> Dict[str, Any]:
        return {method: op.to_swagger() for method, op in self.operations().items()}


class Tag(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1)
    description: Optional[str] = Field(default=None)

    def to_swagger(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"name": self.name}
        if self.description is not None:
            out["description"] = self.description
        return out


class Document(BaseModel):
    """
    [职责] 一个 API 描述单元：单实体单版本文档，或按版本/全量合并后的文档。
    [边界] tags 按 name 去重由 registry 合并逻辑保证；本类不做合并。
    """

    model_config = ConfigDict(extra="forbid")

    swagger: Optional[str] = Field(default=None)  # docstring: 合并文档固定为 "2.0"
    title: str = Field(...)
    description: Optional[str] = Field(default=None)
    version: str = Field(...)
    host: Optional[str] = Field(default=None)
    base_path: str = Field(default="/")
    schemes: List[str] = Field(default_factory=list)
    consumes: List[str] = Field(default_factory=list)
    produces: List[str] = Field(default_factory=list)
    paths: Dict[str, PathItem] = Field(default_factory=dict)
    definitions: Dict[str, Schema] = Field(default_factory=dict)
    tags: List[Tag] = Field(default_factory=list)

    def to_swagger(self) -> Dict[str, Any]:
        info: Dict[str, Any] = {"title": self.title, "version": self.version}
        if self.description is not None:
            info["description"] = self.description

        out: Dict[str, Any] = {}
        if self.swagger is not None:
            out["swagger"] = self.swagger
        out["info"] = info
        if self.host is not None:
            out["host"] = self.host
        out["basePath"] = self.base_path
        if self.schemes:
            out["schemes"] = list(self.schemes)
        if self.consumes:
            out["consumes"] = list(self.consumes)
        if self.produces:
            out["produces"] = list(self.produces)
        out["paths"] = {path: item.to_swagger() for path, item in self.paths.items()}
        out["definitions"] = {name: schema.to_swagger() for name, schema in self.definitions.items()}
        out["tags"] = [tag.to_swagger() for tag in self.tags]
        return out


class RouteDescriptor(BaseModel):
    """
    [职责] 单个实体单条路由的声明：method/path/tags/summary/description + 可选请求/响应样本。
    [边界] request/response 可为实例（推导其类型）或类型/泛型别名（如 list[User]）；只看类型不看数据。
    [上游关系] CrudController.routes() 产出；也可由调用方自定义追加。
    [下游关系] operation builder 与 assembler 消费。
    """

    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)

    method: HttpMethod = Field(...)
    path: str = Field(default="")  # docstring: 相对实体路由的路径，可含 :id
    tags: List[str] = Field(default_factory=list)
    summary: Optional[str] = Field(default=None)
    description: Optional[str] = Field(default=None)
    request: Any = Field(default=None)
    response: Any = Field(default=None)

    @field_validator("method", mode="before")
    @classmethod
    def _upper_method(cls, v: Any) -> Any:
        return v.strip().upper() if isinstance(v, str) else v
