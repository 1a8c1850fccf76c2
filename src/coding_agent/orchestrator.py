# orchestrator.py
# Plan-decide-act loop.
#
# The Orchestrator is the kernel. Models are passive responders: this class
# owns all control flow, the plan, the step cursor and the history. Sub-agents
# receive only the rendered context string.
#
# Control flow:
#   ListFiles(".") -> history
#   -> planner (once)
#   -> per step: decide -> CodeGeneration? coder [+ WriteFile] : dispatch
#   -> history -> next step
#
# Failure policy:
#   context, planning and decision failures abort the run (RunAborted).
#   Tool failures are appended to history and the loop moves on.
#
# All terminal output is delegated to display.py.

import enum
import logging
from typing import NoReturn

from coding_agent import display
from coding_agent.coder import CodeGenerator
from coding_agent.cost import CostTracker
from coding_agent.decider import DecisionResolver
from coding_agent.errors import AgentError, GenerationError, RunAborted, ToolError
from coding_agent.llm import GenerationPort
from coding_agent.models import CodeGeneration, Decision, HistoryEntry, ListFiles, WriteFile
from coding_agent.planner import Planner
from coding_agent.state import ContextStore
from coding_agent.tools import ActionDispatcher

logger = logging.getLogger(__name__)

INITIAL_LISTING = "Initial Directory Listing"
GENERATED_CODE = "Generated Code"
CODE_GENERATION_ERROR = "Code Generation Error"
TOOL_OUTPUT = "Tool Output"
TOOL_ERROR = "Tool Error"


class RunState(str, enum.Enum):
    IDLE = "idle"
    CONTEXT_GATHERED = "context_gathered"
    PLANNED = "planned"
    EXECUTING = "executing"
    DONE = "done"
    FAILED = "failed"


class Orchestrator:
    """
    Drives one goal from an empty history to a finished plan.

    `llm_client` writes code. `reasoning_client` plans and decides; it
    defaults to `llm_client` when not given.

    Example:
        orchestrator = Orchestrator("add a README", client, CostTracker())
        orchestrator.run()
    """

    def __init__(
        self,
        goal: str,
        llm_client: GenerationPort,
        cost_tracker: CostTracker,
        reasoning_client: GenerationPort | None = None,
        dispatcher: ActionDispatcher | None = None,
    ) -> None:
        self._context = ContextStore(goal)
        self._plan: list[str] = []
        self._current_step = 0
        self._state = RunState.IDLE

        reasoning_client = reasoning_client or llm_client
        self._planner = Planner(reasoning_client, cost_tracker)
        self._decider = DecisionResolver(reasoning_client, cost_tracker)
        self._coder = CodeGenerator(llm_client, cost_tracker)
        self._dispatcher = dispatcher or ActionDispatcher()

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def goal(self) -> str:
        return self._context.goal

    @property
    def state(self) -> RunState:
        return self._state

    @property
    def plan(self) -> tuple[str, ...]:
        return tuple(self._plan)

    @property
    def current_step(self) -> int:
        return self._current_step

    @property
    def history(self) -> tuple[HistoryEntry, ...]:
        return self._context.entries

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def run(self) -> RunState:
        """
        Run the whole goal. Returns RunState.DONE.

        Raises RunAborted if context gathering, planning or a decision fails.
        Individual tool failures never abort the run.
        """
        if self._state is not RunState.IDLE:
            raise RuntimeError(f"Orchestrator already ran (state={self._state.value}).")

        self._gather_initial_context()
        self._create_plan()
        self._execute_plan()

        self._state = RunState.DONE
        logger.info("Run finished with %d history entries.", len(self._context))
        return self._state

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------

    def _gather_initial_context(self) -> None:
        display.gathering_context()
        try:
            listing = self._dispatcher.execute(ListFiles(path="."))
        except AgentError as exc:
            self._abort("Gathering initial context", exc)

        self._context.append(INITIAL_LISTING, listing)
        self._state = RunState.CONTEXT_GATHERED
        display.context_gathered(len(listing.splitlines()))

    def _create_plan(self) -> None:
        display.planning()
        try:
            plan = self._planner.create_plan(self.goal, self._context.render())
        except AgentError as exc:
            self._abort("Planning", exc)

        self._plan = list(plan)
        self._state = RunState.PLANNED
        logger.info("Plan created with %d steps.", len(self._plan))
        display.plan_created(self._plan)

    def _execute_plan(self) -> None:
        total = len(self._plan)
        for index, step in enumerate(self._plan):
            self._current_step = index
            self._state = RunState.EXECUTING
            display.step_start(index, total, step)

            try:
                decision = self._decider.decide(step, self._context.render())
            except AgentError as exc:
                self._abort(f"Step {index + 1} ({step!r})", exc, step_index=index)

            display.decision_made(decision)

            if isinstance(decision.action, CodeGeneration):
                self._generate_code(decision)
            else:
                self._dispatch(index, decision)

    # ------------------------------------------------------------------
    # Step handlers
    # ------------------------------------------------------------------

    def _generate_code(self, decision: Decision) -> None:
        task = decision.action.task
        display.writing_code(task)
        try:
            code = self._coder.generate_code(task, self._context.render())
        except GenerationError as exc:
            logger.warning("Code generation failed for task %r: %s", task, exc)
            display.code_generation_failed(exc)
            self._context.append(CODE_GENERATION_ERROR, str(exc))
            return

        display.code_generated(code)
        self._context.append(GENERATED_CODE, code)

        if decision.file_path is None:
            return

        display.saving_code(decision.file_path)
        try:
            self._dispatcher.execute(WriteFile(path=decision.file_path, content=code))
        except ToolError as exc:
            logger.warning("Failed to save generated code to %s: %s", decision.file_path, exc)
            display.code_save_failed(decision.file_path, exc)
        else:
            display.code_saved(decision.file_path)

    def _dispatch(self, index: int, decision: Decision) -> None:
        display.tool_use(decision.action)
        try:
            output = self._dispatcher.execute(decision.action)
        except ToolError as exc:
            logger.warning("Tool execution failed for step %d: %s", index + 1, exc)
            display.tool_error(exc)
            self._context.append(TOOL_ERROR, str(exc))
            return

        display.tool_success(output)
        self._context.append(TOOL_OUTPUT, output)

    def _abort(self, stage: str, cause: Exception, step_index: int | None = None) -> NoReturn:
        self._state = RunState.FAILED
        logger.error("%s failed: %s", stage, cause)
        raise RunAborted(stage, cause, step_index=step_index) from cause
