from enum import Enum


class Role(str, Enum):
    admin = "admin"
    student = "student"
    parent = "parent"


class Category(str, Enum):
    act = "act"
    sat = "sat"
    est = "est"


class Level(str, Enum):
    advanced = "advanced"
    basics = "basics"


class QuizType(str, Enum):
    quiz = "quiz"
    homework = "homework"


# Quiz targeting also accepts "all" on top of the student values.
class QuizCategory(str, Enum):
    act = "act"
    sat = "sat"
    est = "est"
    all = "all"


class QuizLevel(str, Enum):
    advanced = "advanced"
    basics = "basics"
    all = "all"


class Choice(str, Enum):
    a = "a"
    b = "b"
    c = "c"
    d = "d"


CHOICES = tuple(c.value for c in Choice)
