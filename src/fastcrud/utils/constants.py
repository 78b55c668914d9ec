# src/fastcrud/utils/constants.py

"""
[职责] 集中定义文档默认值与协议字段名（swagger 版本/scheme/content type/路径占位符/响应信封）。
[边界] 不包含运行时可变配置；不读取环境变量。
[上游关系] swagger assembler/registry、crud controller、api routers 引用这些稳定值。
[下游关系] 生成的 Swagger 文档与 HTTP 响应信封保持一致字段名。
"""

from __future__ import annotations


SWAGGER_VERSION = "2.0"  # docstring: 合并文档的格式版本
DEFAULT_SCHEMES = ("http",)
JSON_CONTENT_TYPE = "application/json"

MERGED_TITLE = "Fast CRUD API"  # docstring: 合并文档标题前缀
MERGED_DESCRIPTION = "Auto-generated API documentation"
MERGED_ALL_VERSION = "1.0"  # docstring: 全量合并文档的 info.version
MERGED_ALL_BASE_PATH = "/api/v1"
DEFAULT_HOST = "localhost:8080"  # docstring: 全量合并文档的默认 host

ID_PLACEHOLDER = ":id"  # docstring: 路由层 ID 占位符
ID_PATH_PARAM = "{id}"  # docstring: 文档层 ID 占位符
ID_PARAM_NAME = "id"
ID_PARAM_DESCRIPTION = "Entity ID"
BODY_PARAM_NAME = "body"
BODY_PARAM_DESCRIPTION = "Request body"
SUCCESS_STATUS = 200
SUCCESS_DESCRIPTION = "Success"
DEFINITIONS_REF_PREFIX = "#/definitions/"

BATCH_PATH = "/batch"  # docstring: 批量路由路径约定

REQUEST_ID_HEADER = "x-request-id"  # docstring: request header 约定
TIMING_TOTAL_MS_KEY = "total_ms"

ENVELOPE_OK_CODE = 0  # docstring: 成功信封 code
ENVELOPE_OK_MESSAGE = "success"
