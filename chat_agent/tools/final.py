"""
Sentinel ``final`` tool.

Selecting it ends the run with the decision's input as the answer. The
orchestrator intercepts it before dispatch, so the handler only exists to
keep the name reserved and listed in the tools summary.
"""

FINAL_TOOL = "final"


def finish(answer: str) -> dict:
    """No side effect; the answer travels on the decision itself."""
    return {}


def _register():
    from .registry import ToolRegistry

    ToolRegistry.register(
        name=FINAL_TOOL,
        description="Finish and return the answer to the user",
        input_hint="the final answer",
        handler=finish,
    )


_register()
