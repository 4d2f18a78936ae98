"""Core domain logic.

Modules:
- models: Questions, lessons, drafts, progress records, session context
- grader: Answer grading and feedback
- quiz_session: Quiz session state machine
- progress: Progress tracking and completion percentage
- ordering: Lesson display order and publishing
- repositories: Store interfaces and RepositoryError
- enrolment: First sign-in registration
- dashboard: Dashboard and lesson page views
- tutor_chat: Lesson chat assistant
"""

__all__ = [
    "models",
    "grader",
    "quiz_session",
    "progress",
    "ordering",
    "repositories",
    "enrolment",
    "dashboard",
    "tutor_chat",
]
