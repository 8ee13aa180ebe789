"""Detect whether an interactive debugger is attached to this process."""

import sys


def is_debugger_attached() -> bool:
    """
    Return True when a debugger is attached.

    Covers trace-function debuggers (pdb, debugpy, pydevd) and, on 3.12+, tools
    registered in the sys.monitoring debugger slot.
    """
    if sys.gettrace() is not None:
        return True
    monitoring = getattr(sys, "monitoring", None)
    if monitoring is not None:
        return monitoring.get_tool(monitoring.DEBUGGER_ID) is not None
    return False
