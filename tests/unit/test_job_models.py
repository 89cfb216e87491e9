"""Unit tests for job and scrape configuration models."""

import pytest
from pydantic import ValidationError

from skill_seekers.models.job import (
    CategoryConfig,
    ContentSelectors,
    Job,
    JobStatus,
    JobType,
    SkillConfig,
)


class TestJobLifecycle:
    """Test cases for status transitions."""

    @pytest.mark.parametrize(
        "current,target,allowed",
        [
            (JobStatus.QUEUED, JobStatus.RUNNING, True),
            (JobStatus.QUEUED, JobStatus.COMPLETED, False),
            (JobStatus.RUNNING, JobStatus.COMPLETED, True),
            (JobStatus.RUNNING, JobStatus.FAILED, True),
            (JobStatus.COMPLETED, JobStatus.RUNNING, False),
            (JobStatus.FAILED, JobStatus.QUEUED, False),
        ],
    )
    def test_transitions(self, current: JobStatus, target: JobStatus, allowed: bool) -> None:
        """Test the allowed lifecycle edges."""
        job = Job(id="job-1", type=JobType.SCRAPE_DOCS, config=SkillConfig(name="x"), status=current)

        assert job.can_transition_to(target) is allowed

    def test_terminal_statuses(self) -> None:
        """Test that only completed and failed are terminal."""
        config = SkillConfig(name="x")

        assert Job(id="a", type=JobType.SCRAPE_PDF, config=config, status=JobStatus.FAILED).is_terminal
        assert not Job(id="b", type=JobType.SCRAPE_PDF, config=config).is_terminal

    def test_progress_bounds(self) -> None:
        """Test that progress outside 0-100 is rejected."""
        with pytest.raises(ValidationError):
            Job(id="a", type=JobType.SCRAPE_PDF, config=SkillConfig(name="x"), progress=101)

    def test_record_round_trip_drops_token(self) -> None:
        """Test that records omit the access token."""
        job = Job(id="a", type=JobType.SCRAPE_GITHUB, config=SkillConfig(name="x", github_token="t0k"))

        record = job.to_record()

        assert "github_token" not in record["config"]
        assert record["type"] == "scrape_github"
        assert Job.from_record(record).config.github_token is None


class TestSkillConfig:
    """Test cases for SkillConfig helpers and validation."""

    def test_resolved_start_urls(self) -> None:
        """Test start URLs, base URL fallback and empty config."""
        assert SkillConfig(name="x", start_urls=["https://a.dev/1"], base_url="https://a.dev").resolved_start_urls() == [
            "https://a.dev/1"
        ]
        assert SkillConfig(name="x", base_url="https://a.dev").resolved_start_urls() == ["https://a.dev"]
        assert SkillConfig(name="x").resolved_start_urls() == []

    def test_category_patterns_keep_order(self) -> None:
        """Test flattening of category configs."""
        config = SkillConfig(
            name="x",
            categories={
                "api": CategoryConfig(patterns=["/api/"]),
                "guides": CategoryConfig(patterns=["/guide/", "/tutorial/"], priority=2),
            },
        )

        assert config.category_patterns() == {"api": ["/api/"], "guides": ["/guide/", "/tutorial/"]}

    def test_invalid_css_selector_rejected(self) -> None:
        """Test that selectors are validated on construction."""
        with pytest.raises(ValidationError):
            ContentSelectors(main_content="article[")

    def test_config_is_frozen(self) -> None:
        """Test that configs cannot be mutated after creation."""
        config = SkillConfig(name="x")

        with pytest.raises(ValidationError):
            config.name = "y"

    def test_token_hidden_from_repr(self) -> None:
        """Test that the token never appears in repr."""
        assert "secret" not in repr(SkillConfig(name="x", github_token="secret"))
