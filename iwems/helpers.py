import json
import re
import time
import datetime
from enum import Enum
from typing import Optional, Any, Tuple, Dict, List
from google.adk.tools.mcp_tool.mcp_toolset import MCPToolset, StdioServerParameters, StdioConnectionParams
import logging

from config import SUPABASE_ACCESS_TOKEN, SUPABASE_PROJECT_ID
from iwems.exceptions import ConstraintViolation, StoreUnavailable

_supabase_mcp_toolset: Optional[MCPToolset] = None
_supabase_tools: Optional[Dict[str, Any]] = None

# Postgres error fragments that mean "this payload will never be accepted".
CONSTRAINT_ERROR_MARKERS = (
    "violates",
    "duplicate key",
    "constraint",
    "invalid input value for enum",
    "23505",
    "23503",
    "23514",
)

PLACEHOLDER_PATTERN = re.compile(r"(?<!:):([A-Za-z_][A-Za-z0-9_]*)")
UNTRUSTED_DATA_MARKER = "<untrusted-data-"


class MalformedResultError(Exception):
    """The reply carries a result block that cannot be read as JSON rows."""


async def init_supabase_mcp() -> Tuple[Optional[MCPToolset], Optional[Dict[str, Any]]]:
    global _supabase_mcp_toolset, _supabase_tools

    if _supabase_mcp_toolset and _supabase_tools:
        return _supabase_mcp_toolset, _supabase_tools

    logging.info("init_supabase_mcp: Attempting to initialize Supabase MCP toolset.")
    if not SUPABASE_ACCESS_TOKEN:
        logging.error("init_supabase_mcp: SUPABASE_ACCESS_TOKEN environment variable is not set.")
        raise ValueError("SUPABASE_ACCESS_TOKEN environment variable is not set.")

    try:
        connection_params = StdioServerParameters(
            command="npx",
            args=["-y", "@supabase/mcp-server-supabase@latest", "--access-token", SUPABASE_ACCESS_TOKEN],
        )
        mcp = MCPToolset(
            connection_params=StdioConnectionParams(server_params=connection_params, timeout=20),
            tool_filter=["execute_sql"]
        )
        tools = await mcp.get_tools()
        if not tools or "execute_sql" not in [tool.name for tool in tools]:
            logging.error("init_supabase_mcp: 'execute_sql' tool not found after MCP server connection.")
            raise RuntimeError("'execute_sql' tool not found in Supabase MCP server.")

        _supabase_mcp_toolset = mcp
        _supabase_tools = {tool.name: tool for tool in tools}
        logging.info("init_supabase_mcp: Supabase MCP toolset initialized successfully with 'execute_sql' tool.")

    except Exception as e:
        logging.exception(f"init_supabase_mcp: Failed to initialize Supabase MCP toolset: {e}")
        _supabase_mcp_toolset = None
        _supabase_tools = None
        raise RuntimeError(f"Failed to initialize Supabase MCP toolset: {e}") from e

    return _supabase_mcp_toolset, _supabase_tools


def sql_quote_value(val: Any) -> str:
    if val is None:
        return 'NULL'
    if isinstance(val, Enum):
        val = val.value
    if isinstance(val, bool):
        return 'TRUE' if val else 'FALSE'
    if isinstance(val, (int, float)):
        return str(val)
    if isinstance(val, (datetime.date, datetime.datetime)):
        return f"'{val.isoformat()}'"
    if isinstance(val, (dict, list)):
        val_str = json.dumps(val).replace("'", "''")
        return f"'{val_str}'"
    val_str = str(val).replace("'", "''")
    return f"'{val_str}'"


def bind_params(sql: str, params: Optional[Dict[str, Any]] = None) -> str:
    """Substitutes `:name` placeholders with quoted literals. `::type` casts are left alone."""
    if not params:
        return sql
    used = set()

    def _replace(match: re.Match) -> str:
        name = match.group(1)
        if name not in params:
            return match.group(0)
        used.add(name)
        return sql_quote_value(params[name])

    # Single pass so bound values are never re-scanned for placeholders.
    final_sql = PLACEHOLDER_PATTERN.sub(_replace, sql)
    for k in params.keys() - used:
        logging.warning(f"bind_params: Parameter key '{k}' not found in SQL query. SQL: {sql}")
    return final_sql


async def execute_supabase_sql(sql: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    start_time = time.perf_counter()
    logging.debug(f"execute_supabase_sql: Received SQL: {sql}, Params: {params}")
    try:
        mcp_set, tools_map = await init_supabase_mcp()
        sql_tool = tools_map.get("execute_sql") if tools_map else None
        if not mcp_set or not sql_tool:
            logging.error("execute_supabase_sql: Supabase MCP 'execute_sql' tool not available.")
            return {"status": "error", "error": "Supabase MCP toolset not available."}

        final_sql = bind_params(sql, params)
        mcp_args = {"query": final_sql, "project_id": SUPABASE_PROJECT_ID}
        logging.debug(f"execute_supabase_sql: Executing with MCP args: {mcp_args}")

        mcp_result = await sql_tool.run_async(args=mcp_args, tool_context=None)
        duration = (time.perf_counter() - start_time) * 1000

        if getattr(mcp_result, "error_message", None):
            logging.error(f"execute_supabase_sql: MCP tool returned an error: {mcp_result.error_message}")
            return {"status": "error", "error": str(mcp_result.error_message)}

        content = getattr(mcp_result, "content", None)
        if content and hasattr(content[0], "text"):
            text_response = content[0].text
            try:
                text_json = json.loads(text_response.strip('"'))
            except (json.JSONDecodeError, TypeError):
                text_json = None
            if isinstance(text_json, dict) and text_json.get("error"):
                logging.error(f"execute_supabase_sql: Database returned error: {text_json['error']}")
                return {"status": "error", "error": text_json["error"]}

            try:
                extracted_data = extract_untrusted_json(text_response)
            except MalformedResultError as mre:
                logging.error(f"execute_supabase_sql: Unreadable result for SQL: {sql.strip()[:50]}... Error: {mre}")
                return {"status": "error", "error": f"Malformed database response: {mre}"}
            logging.info(f"execute_supabase_sql: Query executed. Duration: {duration:.2f}ms. SQL: {sql.strip()[:50]}...")
            if extracted_data is None:
                return {"status": "success", "data": []}
            if isinstance(extracted_data, list):
                return {"status": "success", "data": extracted_data}
            return {"status": "success", "data": [extracted_data]}

        logging.error(f"execute_supabase_sql: No content or unexpected format in MCP response: {mcp_result}")
        return {"status": "error", "error": "No content or unexpected format in database response."}

    except ValueError as ve:
        logging.error(f"execute_supabase_sql: Initialization error: {ve}")
        return {"status": "error", "error": str(ve)}
    except RuntimeError as rte:
        logging.error(f"execute_supabase_sql: Runtime error during MCP interaction: {rte}")
        return {"status": "error", "error": str(rte)}
    except Exception as e:
        logging.exception(f"execute_supabase_sql: Unexpected error executing SQL '{sql[:100]}...': {e}")
        return {"status": "error", "error": "An unexpected error occurred during SQL execution."}


def extract_untrusted_json(text_data: str) -> Optional[Any]:
    """Rows inside the reply's untrusted-data block, or None when the reply has no block.

    Raises MalformedResultError when a block is present but does not parse.
    """
    # The MCP server may return the payload as a JSON-encoded string.
    if text_data.startswith('"') and text_data.endswith('"'):
        try:
            text_data = json.loads(text_data)
        except json.JSONDecodeError as e:
            if UNTRUSTED_DATA_MARKER in text_data:
                raise MalformedResultError(f"cannot un-escape reply: {e}") from e
            logging.warning(f"extract_untrusted_json: Failed to un-escape JSON string. Error: {e}")
            return None

    pattern = r'<untrusted-data-.*?>\s*(\[.*\])\s*</untrusted-data-.*?>'
    match = re.search(pattern, text_data, re.DOTALL)
    if not match:
        if UNTRUSTED_DATA_MARKER in text_data:
            raise MalformedResultError("result block does not hold a JSON array")
        logging.debug("extract_untrusted_json: No JSON array found in text.")
        return None

    json_str = match.group(1).strip()
    try:
        return json.loads(json_str)
    except json.JSONDecodeError as e:
        logging.warning(f"extract_untrusted_json: JSON parsing failed for extracted string: '{json_str}'. Error: {e}")
        raise MalformedResultError(str(e)) from e


def classify_store_error(error: Any) -> Exception:
    """Maps an error envelope message to ConstraintViolation (permanent) or StoreUnavailable (transient)."""
    text = str(error or "").lower()
    if any(marker in text for marker in CONSTRAINT_ERROR_MARKERS):
        return ConstraintViolation()
    return StoreUnavailable()


async def fetch_rows(sql: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
    """Runs a statement and returns its rows, raising instead of returning an error envelope."""
    result = await execute_supabase_sql(sql, params)
    if not result or result.get("status") != "success":
        error = (result or {}).get("error", "Unknown error")
        logging.error(f"fetch_rows: Statement failed: {error}. SQL: {sql.strip()[:80]}...")
        raise classify_store_error(error)
    return result.get("data") or []
