from typing import Dict, List, Any, Optional
from habit_hub.tools.base import BaseTool
from habit_hub.tools.habits import CreateHabitTool, UpdateHabitTool, ReportProgressTool
import logging

logger = logging.getLogger(__name__)


class ToolRegistry:
    """Registry for the operations the habit agent may invoke"""

    def __init__(self):
        self.tools: Dict[str, BaseTool] = {}
        self._register_tools()

    def _register_tools(self):
        """Register all available tools"""
        tools = [
            CreateHabitTool(),
            UpdateHabitTool(),
            ReportProgressTool(),
        ]

        for tool in tools:
            self.tools[tool.name] = tool
            logger.debug(f"Registered tool: {tool.name}")

    def get_tool(self, name: str) -> Optional[BaseTool]:
        """Get a tool by name"""
        return self.tools.get(name)

    def get_openai_schemas(self) -> List[Dict[str, Any]]:
        """Get OpenAI function calling schemas for all tools"""
        return [tool.to_openai_schema() for tool in self.tools.values()]


# Global tool registry instance
tool_registry = ToolRegistry()
