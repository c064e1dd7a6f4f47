from abc import ABC, abstractmethod
from typing import Dict, Any, List, Type
from pydantic import BaseModel, ValidationError


class ToolResult(BaseModel):
    """Result from a tool execution"""
    success: bool
    data: Any = None
    message: str = ""


class ToolValidationError(ValueError):
    """Tool arguments that cannot be used for a write; `message` is shown to the user"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


def _field_name(loc) -> str:
    return ".".join(str(part) for part in loc if not isinstance(part, int)) or "input"


class BaseTool(ABC):
    """Base class for all AI tools"""

    @property
    @abstractmethod
    def name(self) -> str:
        """Tool name"""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Tool description"""
        pass

    @property
    @abstractmethod
    def args_model(self) -> Type[BaseModel]:
        """Pydantic model the tool arguments must satisfy"""
        pass

    @property
    def action_phrase(self) -> str:
        """Used in clarification questions, e.g. "create that habit" """
        return "do that"

    @property
    def parameters(self) -> Dict[str, Any]:
        """JSON schema for tool parameters"""
        schema = self.args_model.model_json_schema()
        schema.pop("title", None)
        for prop in schema.get("properties", {}).values():
            prop.pop("title", None)
        return schema

    def validate(self, arguments: Dict[str, Any], context: Any) -> BaseModel:
        """Check untrusted arguments against the schema and the current context"""
        if not isinstance(arguments, dict):
            raise ToolValidationError(f"I couldn't work out the details needed to {self.action_phrase}. Could you rephrase?")
        try:
            args = self.args_model.model_validate(arguments)
        except ValidationError as e:
            raise ToolValidationError(self.clarification_for(e.errors()))
        self.check_context(args, context)
        return args

    def check_context(self, args: BaseModel, context: Any) -> None:
        """Raise ToolValidationError when arguments refer to things that do not exist"""
        pass

    def clarification_for(self, errors: List[Dict[str, Any]]) -> str:
        missing = sorted({_field_name(e["loc"]) for e in errors if e.get("type") == "missing"})
        invalid = sorted({_field_name(e["loc"]) for e in errors if e.get("type") != "missing"} - set(missing))
        if missing:
            return f"I need a bit more information to {self.action_phrase}. Could you tell me the {', '.join(missing)}?"
        return f"Some details didn't look right ({', '.join(invalid)}). Could you rephrase so I can {self.action_phrase}?"

    @abstractmethod
    def execute(self, store: Any, args: BaseModel, context: Any) -> ToolResult:
        """Perform the tool's single write"""
        pass

    def to_openai_schema(self) -> Dict[str, Any]:
        """Convert to OpenAI function calling schema"""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters
            }
        }
