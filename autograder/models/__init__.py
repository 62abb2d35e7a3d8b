# Importing the models registers their tables on Base.metadata
from autograder.models.user import User  # noqa
from autograder.models.assignment import Assignment  # noqa
from autograder.models.submission import Submission  # noqa
from autograder.models.grade import Grade  # noqa
