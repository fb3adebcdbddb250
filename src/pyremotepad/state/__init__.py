"""State layer.

This package is the single place where input from every transport meets:
the cross-thread :class:`~pyremotepad.state.action_queue.ActionQueue`, and the
:class:`~pyremotepad.state.merge.InputMergeState` that only the tick
thread mutates while draining it.
"""
