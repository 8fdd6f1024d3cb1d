"""Action Dispatcher: runs resolved tool calls through their handlers.

Execution is sequential and fault-isolated: a call whose handler is
missing or whose handler raises is logged and skipped. The remaining
calls still run. Arguments that do not match the tool's schema are
logged and still passed to the handler.
"""

import logging
import time
from typing import Any, Iterable, Mapping, Optional

from jsonschema import Draft7Validator
from jsonschema import SchemaError

from application.actions.base import PROPERTIES_KEY, ActionContext, ActionHandler
from application.actions.catalog import ToolCatalog
from application.exceptions import ActionExecutionError, ConfigurationError
from domain.models import ActionResult, ToolCall
from observability.metrics import action_execution_count, action_execution_errors, action_execution_time

logger = logging.getLogger(__name__)


class ActionDispatcher:
    """Maps tool names to handlers and executes resolved calls."""

    def __init__(self, handlers: Iterable[ActionHandler], catalog: ToolCatalog) -> None:
        by_name: dict[str, ActionHandler] = {}
        for handler in handlers:
            if handler.name in by_name:
                raise ConfigurationError(f"Duplicate handler for action '{handler.name}'", details={"action": handler.name})
            by_name[handler.name] = handler
        self._handlers: Mapping[str, ActionHandler] = by_name
        self._catalog = catalog
        self._validators = {tool.name: Draft7Validator(tool.parameters) for tool in catalog.action_tools if tool.parameters}
        self.validate()

    @property
    def handler_names(self) -> list[str]:
        return list(self._handlers)

    def validate(self) -> None:
        """Check that handlers cover exactly the catalog's domain tools.

        Raises:
            ConfigurationError: If a tool has no handler or a handler has no tool
        """
        tool_names = {tool.name for tool in self._catalog.action_tools}
        handler_names = set(self._handlers)
        missing = sorted(tool_names - handler_names)
        unknown = sorted(handler_names - tool_names)
        if missing or unknown:
            raise ConfigurationError(
                "Action handlers do not match the tool catalog",
                error_code="handler_catalog_mismatch",
                details={"tools_without_handler": missing, "handlers_without_tool": unknown},
            )
        for validator in self._validators.values():
            try:
                validator.check_schema(validator.schema)
            except SchemaError as e:
                raise ConfigurationError(f"Invalid parameters schema: {e.message}", error_code="invalid_tool_schema") from e

    async def execute(self, tool_calls: Iterable[ToolCall], context: ActionContext) -> list[ActionResult]:
        """Execute each call in order; one result per successful handler."""
        results: list[ActionResult] = []
        for call in tool_calls:
            result = await self._execute_one(call, context)
            if result is not None:
                results.append(result)
        logger.info(f"🔧 Executed actions: {len(results)} results")
        return results

    async def _execute_one(self, call: ToolCall, context: ActionContext) -> Optional[ActionResult]:
        handler = self._handlers.get(call.name)
        if handler is None:
            logger.warning(f"⚠️ No handler for action '{call.name}', skipping")
            action_execution_errors.add(1, {"action": call.name, "reason": "no_handler"})
            return None

        start_time = time.time()
        logger.info(f"🔧 Action execution requested: {call.name}({call.args})")
        self._warn_on_schema_mismatch(call)
        try:
            args: dict[str, Any] = {**call.args, PROPERTIES_KEY: dict(context.properties)}
            result = await handler.execute(args, context)
        except Exception as e:
            error = ActionExecutionError(call.name, e)
            logger.error(f"❌ {error.message}", exc_info=True)
            action_execution_errors.add(1, {"action": call.name, "reason": type(e).__name__})
            return None
        finally:
            execution_time_ms = (time.time() - start_time) * 1000
            action_execution_count.add(1, {"action": call.name})
            action_execution_time.record(execution_time_ms, {"action": call.name})

        logger.info(f"🔧 Action executed successfully: {call.name} in {execution_time_ms:.2f}ms")
        return result

    def _warn_on_schema_mismatch(self, call: ToolCall) -> list[str]:
        """Log arguments that do not match the tool's schema; the handler still runs."""
        validator = self._validators.get(call.name)
        if validator is None:
            return []
        errors = []
        for error in list(validator.iter_errors(call.args))[:5]:
            path = ".".join(str(p) for p in error.absolute_path) if error.absolute_path else "root"
            errors.append(f"{path}: {error.message}")
        if errors:
            logger.warning(f"⚠️ Arguments for '{call.name}' do not match its schema: {'; '.join(errors)}")
        return errors
