"""
Data contracts for Steam Reviews API responses.
"""

from pydantic import BaseModel, Field


def compute_review_score(positive: int, negative: int) -> int:
    """
    Percentage of positive reviews, rounded half up.

    Defined as 0 when there are no reviews at all.

    >>> compute_review_score(75, 25)
    75
    >>> compute_review_score(0, 0)
    0
    """
    total = positive + negative
    if total <= 0:
        return 0
    # floor(100 * positive / total + 0.5) in integer arithmetic
    return (200 * positive + total) // (2 * total)


class ReviewQuerySummary(BaseModel):
    """Summary of review query results."""

    num_reviews: int = Field(default=0, description="Number of reviews returned")
    review_score: int = Field(default=0, ge=0, le=9, description="Review score (0-9 scale)")
    review_score_desc: str = Field(
        default="", description="Review score description (e.g., 'Very Positive')"
    )
    total_positive: int = Field(default=0, ge=0, description="Total positive reviews")
    total_negative: int = Field(default=0, ge=0, description="Total negative reviews")
    total_reviews: int = Field(default=0, ge=0, description="Total review count")


class SteamReviewsResponse(BaseModel):
    """
    Response from the Steam Reviews API.

    Endpoint: /appreviews/{appid}?json=1&num_per_page=0
    """

    success: int = Field(..., description="1 if successful, 0 otherwise")
    query_summary: ReviewQuerySummary | None = None

    @property
    def is_successful(self) -> bool:
        """Check if API request was successful."""
        return self.success == 1


class ReviewStats(BaseModel):
    """Aggregate review statistics stored on a library entry."""

    score: int = Field(..., ge=0, le=100, description="Percent positive")
    count: int = Field(..., ge=0)
    summary: str = Field(default="", description="Steam sentiment label")

    @classmethod
    def from_summary(cls, summary: ReviewQuerySummary) -> "ReviewStats":
        """Compute the local score from raw positive/negative counts."""
        positive, negative = summary.total_positive, summary.total_negative
        return cls(
            score=compute_review_score(positive, negative),
            count=summary.total_reviews or positive + negative,
            summary=summary.review_score_desc,
        )
