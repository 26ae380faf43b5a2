"""
Progress engine services.

event_log            read-only queries over completion events
streak_calculator    current/longest streaks
harmony_score        balance score over the trailing window
avatar_state         per-category light states
milestone_engine     milestone evaluation, awards and celebration queue
progress_orchestrator  full recompute entry point
hard_reset           per-user data purge
"""
