import json
from typing import Any, Awaitable, Callable

from shared.helper.HelperConfig import HelperConfig
from shared.knowledge import lookup
from shared.knowledge.corpus import KNOWLEDGE
from shared.models.knowledge import Knowledge
from shared.models.tool import ToolDescriptor
from shared.tools.ToolProviderInterface import ProviderState, ToolProviderInterface


def _string_schema(field: str, description: str) -> dict:
    return {
        "type": "object",
        "properties": {field: {"type": "string", "description": description}},
        "required": [field],
    }


TOOLS: list[ToolDescriptor] = [
    ToolDescriptor(
        name="search_knowledge",
        description=(
            "Search Logan's portfolio knowledge base for information about his experience, skills, projects, "
            "education, interests, or background. Use this for general or broad queries."
        ),
        input_schema=_string_schema("query", "The search query"),
    ),
    ToolDescriptor(
        name="get_project_details",
        description=(
            "Get detailed information about a specific featured project by name. Projects include: MCP Server "
            "Framework, Chatbot Framework, Azure DevOps Integration, Knowledge Base System."
        ),
        input_schema=_string_schema("project_name", "Name or keyword of the project to look up"),
    ),
    ToolDescriptor(
        name="get_experience",
        description=(
            "Get details about Logan's work experience at a specific company. Companies include: TIH, Derivco, "
            "DVT, Seecrypt, Covariant, UD Trucks, Enermatics, Infotech, ITW."
        ),
        input_schema=_string_schema("company", "Company name or abbreviation"),
    ),
    ToolDescriptor(
        name="get_skills",
        description="Get Logan's technical skills filtered by category: 'languages', 'frameworks', 'concepts', or 'all'.",
        input_schema=_string_schema("category", "Skill category: languages, frameworks, concepts, or all"),
    ),
    ToolDescriptor(
        name="get_portfolio_info",
        description=(
            "Get information about how this portfolio website is built, its architecture, technology choices, and "
            "design patterns. Topics include: frontend, theming, chatbot, retrieval pipeline, tool providers, "
            "security, access control, diagrams, background animation, PWA, deployment."
        ),
        input_schema=_string_schema(
            "topic",
            "Topic to look up: overview, frontend, theming, chatbot, security, access, diagrams, animation, pwa, "
            "deployment, or a general question",
        ),
    ),
]

# tool name -> (input field, max length)
INPUT_LIMITS: dict[str, tuple[str, int]] = {
    "search_knowledge": ("query", 500),
    "get_project_details": ("project_name", 200),
    "get_experience": ("company", 200),
    "get_skills": ("category", 100),
    "get_portfolio_info": ("topic", 200),
}


class ToolProviderLocal(ToolProviderInterface):
    """In-process tools over the knowledge corpus and the retrieval pipeline. Always available."""

    def __init__(self, helper_config: HelperConfig, rag_pipeline: Any, knowledge: Knowledge = KNOWLEDGE):
        super().__init__(helper_config=helper_config)
        self._rag_pipeline = rag_pipeline
        self._knowledge = knowledge
        self._executors: dict[str, Callable[[dict], Awaitable[str]]] = {
            "search_knowledge": self._search_knowledge,
            "get_project_details": self._get_project_details,
            "get_experience": self._get_experience,
            "get_skills": self._get_skills,
            "get_portfolio_info": self._get_portfolio_info,
        }
        self.state = ProviderState.READY

    @property
    def name(self) -> str:
        return "local"

    async def initialize(self) -> None:
        if self.state != ProviderState.DISPOSED:
            self.state = ProviderState.READY

    async def get_tools(self) -> list[ToolDescriptor]:
        return list(TOOLS)

    ##########################################
    ############### EXECUTORS ################
    ##########################################

    async def _search_knowledge(self, tool_input: dict) -> str:
        return await self._rag_pipeline.search(tool_input["query"])

    async def _get_project_details(self, tool_input: dict) -> str:
        return json.dumps(lookup.get_project_details(tool_input["project_name"], self._knowledge))

    async def _get_experience(self, tool_input: dict) -> str:
        return json.dumps(lookup.get_experience(tool_input["company"], self._knowledge))

    async def _get_skills(self, tool_input: dict) -> str:
        return json.dumps(lookup.get_skills_by_category(tool_input["category"], self._knowledge))

    async def _get_portfolio_info(self, tool_input: dict) -> str:
        return json.dumps(lookup.get_portfolio_info(tool_input["topic"], self._knowledge))

    async def execute_tool(self, name: str, tool_input: dict[str, Any]) -> str:
        executor = self._executors.get(name)
        if executor is None:
            return json.dumps({"error": f"Unknown tool: {name}"})
        return await executor(tool_input)

    def validate_tool_input(self, name: str, tool_input: Any) -> bool:
        limit = INPUT_LIMITS.get(name)
        if limit is None or not isinstance(tool_input, dict):
            return False
        field, max_len = limit
        value = tool_input.get(field)
        return isinstance(value, str) and len(value) <= max_len
