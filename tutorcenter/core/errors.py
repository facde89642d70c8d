"""
Domain errors raised by the quiz flow. Routes translate them into HTTP responses.
"""


class QuizNotFoundError(LookupError):
    def __init__(self, quiz_id):
        super().__init__(f"Quiz {quiz_id} not found")
        self.quiz_id = quiz_id


class QuizLoadError(RuntimeError):
    """The quiz or its questions could not be fetched from the database."""


class SubmissionWriteError(RuntimeError):
    """The submission row could not be written. The attempt keeps its answers."""


class DuplicateSubmissionError(RuntimeError):
    def __init__(self, user_id, quiz_id):
        super().__init__(f"User {user_id} already submitted quiz {quiz_id}")
        self.user_id = user_id
        self.quiz_id = quiz_id


class AttemptStateError(RuntimeError):
    """An attempt operation was requested in a state that does not allow it."""


class InvalidAnswerError(ValueError):
    pass


class QuizNotAssignedError(PermissionError):
    def __init__(self, quiz_id):
        super().__init__(f"Quiz {quiz_id} is not assigned to this user")
        self.quiz_id = quiz_id


class QuizExpiredError(RuntimeError):
    def __init__(self, quiz_id):
        super().__init__(f"The deadline for quiz {quiz_id} has passed")
        self.quiz_id = quiz_id


class InvalidScoreError(ValueError):
    def __init__(self, score, total_questions):
        super().__init__(f"Score must be between 0 and {total_questions}, got {score}")
        self.score = score
        self.total_questions = total_questions
