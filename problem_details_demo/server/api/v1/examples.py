"""
Example Endpoints.

Endpoints exercising each error path: a plain JSON resource, one raising an
explicit 400 problem and one failing with an unexpected exception.
"""

from ...errors import ProblemResponseError
from ...routing import advised_router

router = advised_router()


@router.get(
    "/",
    summary="Example Resource",
    description="Return an empty JSON object. Any other method on this path is a 405.",
)
async def get_example():
    return {}


@router.get(
    "/throws-a-problem",
    summary="Raise a Problem",
    description="Always fails with a 400 error-response exception.",
)
async def throws_a_problem():
    raise ProblemResponseError(400, cause=RuntimeError("a problem"))


@router.get(
    "/throws-an-exception",
    summary="Raise an Exception",
    description="Always fails with an unexpected RuntimeError.",
)
async def throws_an_exception():
    raise RuntimeError("Something happened")
