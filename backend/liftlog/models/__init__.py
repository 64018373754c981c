from liftlog.models.workout_draft import WorkoutDraft

__all__ = ["WorkoutDraft"]
