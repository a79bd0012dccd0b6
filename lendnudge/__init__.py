"""LendNudge: private loan tracking and friendly reminders."""
