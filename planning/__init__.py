"""
Recurring task planning: periodicity rules and weekly availability schedules.
"""
