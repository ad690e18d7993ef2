"""Pipeline orchestration for pull request, issue and comment checks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .analysis.aggregator import aggregate, review_comments
from .analysis.specs import build_codebase_analysis, guidelines_require_specs
from .config import JacquezConfig, ReviewConfig
from .errors import GitHubError
from .git.diff import DiffPatch
from .github.client import GitHubClient
from .guidelines.cache import GuidelineCache
from .guidelines.resolver import GuidelineResolver
from .judgment.judge import Judge
from .judgment.prompts import render_comment_thread
from .llm.runner import LLMRunner
from .logging import get_logger
from .models import (
    AnalysisResult,
    ChangedFile,
    CheckRunReport,
    DescriptionJudgment,
    FileJudgment,
)
from .report.check_run import CheckRunReporter

PR_WELCOME_COMMENT = "Hello! Thanks for opening this pull request. 🤖"
ISSUE_WELCOME_COMMENT = "Hello! Thanks for opening this issue. We'll take a look at it soon. 🤖"

SKIPPED_DRAFT = "Skipped: Draft PR"
SKIPPED_BOT = "Skipped: Bot PR"
SKIPPED_NO_GUIDELINES = "Skipped: No contributing guidelines found"


@dataclass(frozen=True)
class PullRequest:
    """The pull request fields the pipeline needs."""

    owner: str
    repo: str
    number: int
    body: str
    head_sha: str
    draft: bool = False
    author_type: str = "User"

    @classmethod
    def from_event(cls, payload: Mapping[str, Any]) -> "PullRequest":
        """Build from a ``pull_request`` webhook or Actions event payload."""
        pr = payload.get("pull_request")
        repository = payload.get("repository")
        if not isinstance(pr, Mapping) or not isinstance(repository, Mapping):
            raise ValueError("Event payload does not describe a pull request")
        try:
            return cls(
                owner=str(repository["owner"]["login"]),
                repo=str(repository["name"]),
                number=int(pr["number"]),
                body=pr.get("body") or "",
                head_sha=str(pr["head"]["sha"]),
                draft=bool(pr.get("draft")),
                author_type=str((pr.get("user") or {}).get("type") or "User"),
            )
        except (KeyError, TypeError) as exc:
            raise ValueError(f"Pull request payload is missing {exc}") from exc


@dataclass
class PullRequestOutcome:
    """Result of a pull request run, skipped or analysed."""

    status: str
    summary: str
    result: Optional[AnalysisResult] = None
    report: Optional[CheckRunReport] = None
    check_run_id: Optional[int] = None

    @property
    def violations_found(self) -> bool:
        return self.result is not None and self.result.violations_found

    @property
    def violation_count(self) -> int:
        return self.result.violation_count if self.result is not None else 0

    def outputs(self) -> Dict[str, str]:
        return {
            "violations-found": "true" if self.violations_found else "false",
            "violation-count": str(self.violation_count),
            "analysis-summary": self.summary,
        }


class Orchestrator:
    """Coordinates guideline resolution, judgments, aggregation and reporting."""

    def __init__(
        self,
        client: GitHubClient,
        judge: Judge,
        resolver: GuidelineResolver | None = None,
        *,
        reporter: CheckRunReporter | None = None,
        review: ReviewConfig | None = None,
    ) -> None:
        self.client = client
        self.judge = judge
        self.resolver = resolver or GuidelineResolver(client)
        self.reporter = reporter or CheckRunReporter()
        self.review = review or ReviewConfig()
        self.logger = get_logger("orchestrator")

    @classmethod
    def from_config(
        cls, config: JacquezConfig, *, cache: GuidelineCache | None = None
    ) -> "Orchestrator":
        client = GitHubClient(config.github_token)
        runner_kwargs: Dict[str, Any] = {
            "base_url": config.llm.base_url,
            "max_tokens": config.llm.max_tokens,
            "request_timeout": config.llm.request_timeout,
        }
        if config.llm.api_key:
            runner_kwargs["api_key"] = config.llm.api_key
        runner = LLMRunner(config.llm.model, **runner_kwargs)
        if not config.cache.enabled:
            cache = None
        elif cache is None:
            cache = GuidelineCache(config.cache.ttl_seconds)
        return cls(
            client,
            Judge(runner, skip_keywords=config.skip_keywords),
            GuidelineResolver(client, cache),
            review=config.review,
        )

    # ------------------------------------------------------------------
    # Pull requests

    def run_pull_request(self, pr: PullRequest) -> PullRequestOutcome:
        """Analyse a pull request and publish the check run.

        Only failures while publishing the check run or review propagate.
        """
        self.logger.info("Starting analysis for %s/%s#%d", pr.owner, pr.repo, pr.number)
        if self.review.skip_drafts and pr.draft:
            self.logger.info("Skipping draft PR analysis")
            return PullRequestOutcome(status="skipped", summary=SKIPPED_DRAFT)
        if pr.author_type == "Bot":
            self.logger.info("Skipping bot PR analysis")
            return PullRequestOutcome(status="skipped", summary=SKIPPED_BOT)

        guidelines = self.resolver.resolve(pr.owner, pr.repo)
        if guidelines is None:
            self.logger.warning("No contributing guidelines found, skipping analysis")
            return PullRequestOutcome(status="skipped", summary=SKIPPED_NO_GUIDELINES)

        result, file_judgments = self.analyze_pull_request(pr, guidelines.content)
        report = self.reporter.build_report(result)
        check_run_id = self.publish_check_run(pr, report)

        if self.review.post_review_comments:
            comments = review_comments(file_judgments)
            if comments:
                self.client.post_review(pr.owner, pr.repo, pr.number, comments)
                self.logger.info("Posted review with %d inline comment(s)", len(comments))

        return PullRequestOutcome(
            status="ok",
            summary=result.summary,
            result=result,
            report=report,
            check_run_id=check_run_id,
        )

    def analyze_pull_request(
        self, pr: PullRequest, guidelines: str
    ) -> Tuple[AnalysisResult, List[FileJudgment]]:
        files = self._changed_files(pr)

        codebase_analysis = ""
        if guidelines_require_specs(guidelines) and files:
            self.logger.info("Contributing guidelines mention specs, analyzing codebase")
            codebase_analysis = build_codebase_analysis(self.client, pr.owner, pr.repo, files)

        description = self.judge.judge_submission(
            guidelines,
            pr.body,
            submission_type="pull request",
            thread_context=self._comment_thread(pr.owner, pr.repo, pr.number),
            codebase_analysis=codebase_analysis,
        )

        file_judgments: List[FileJudgment] = []
        for changed in files:
            if not changed.patch:
                continue
            records = tuple(DiffPatch(changed.patch))
            if not records:
                continue
            findings = self.judge.judge_file(guidelines, changed.filename, records)
            file_judgments.append(
                FileJudgment(filename=changed.filename, records=records, findings=tuple(findings))
            )

        result = aggregate(description, file_judgments)
        self.logger.info("%s", result.summary)
        return result, file_judgments

    def publish_check_run(self, pr: PullRequest, report: CheckRunReport) -> int:
        # One request; the check run is never left in_progress.
        check_run_id = self.client.create_check_run(
            pr.owner,
            pr.repo,
            name=self.review.check_name,
            head_sha=pr.head_sha,
            status="completed",
            conclusion=report.conclusion,
            output=report.output(),
        )
        self.logger.info(
            "Check run completed: %s with %d annotation(s)",
            report.conclusion,
            len(report.annotations),
        )
        return check_run_id

    def handle_pull_request_opened(self, pr: PullRequest) -> PullRequestOutcome:
        """Webhook flow: run the check, then comment on the description if needed."""
        outcome = self.run_pull_request(pr)
        if outcome.summary == SKIPPED_NO_GUIDELINES:
            self.client.post_comment(pr.owner, pr.repo, pr.number, PR_WELCOME_COMMENT)
            self.logger.info("Generic welcome comment posted for PR")
            return outcome
        if outcome.result is not None:
            for violation in outcome.result.details:
                if violation.line == 0 and violation.message:
                    self.client.post_comment(pr.owner, pr.repo, pr.number, violation.message)
                    self.logger.info("Description comment posted for PR")
        return outcome

    # ------------------------------------------------------------------
    # Issues and comments

    def handle_issue_opened(
        self, owner: str, repo: str, number: int, body: str, *, author_type: str = "User"
    ) -> Optional[DescriptionJudgment]:
        if author_type == "Bot":
            self.logger.info("Skipping bot issue")
            return None
        guidelines = self.resolver.resolve(owner, repo)
        if guidelines is None:
            self.client.post_comment(owner, repo, number, ISSUE_WELCOME_COMMENT)
            self.logger.info("Generic welcome comment posted for issue")
            return None
        return self._judge_and_comment(owner, repo, number, body, guidelines.content, "issue")

    def handle_comment_created(
        self, owner: str, repo: str, number: int, body: str, *, author_type: str = "User"
    ) -> Optional[DescriptionJudgment]:
        if author_type == "Bot":
            self.logger.info("Skipping bot comment")
            return None
        guidelines = self.resolver.resolve(owner, repo)
        if guidelines is None:
            self.logger.info("No contributing guidelines found, skipping comment analysis")
            return None
        if len(body) <= self.review.min_comment_length:
            self.logger.info("Comment too short (%d chars), skipping", len(body))
            return None
        return self._judge_and_comment(owner, repo, number, body, guidelines.content, "comment")

    def _judge_and_comment(
        self,
        owner: str,
        repo: str,
        number: int,
        body: str,
        guidelines: str,
        submission_type: str,
    ) -> DescriptionJudgment:
        judgment = self.judge.judge_submission(
            guidelines,
            body,
            submission_type=submission_type,
            thread_context=self._comment_thread(owner, repo, number),
        )
        if judgment.comment_needed and judgment.comment:
            self.client.post_comment(owner, repo, number, judgment.comment)
            self.logger.info("Comment posted for %s (%s)", submission_type, judgment.reasoning)
        else:
            self.logger.info(
                "No clear violations found, skipping comment for %s (%s)",
                submission_type,
                judgment.reasoning,
            )
        return judgment

    # ------------------------------------------------------------------
    # Helpers

    def _changed_files(self, pr: PullRequest) -> List[ChangedFile]:
        try:
            return self.client.fetch_changed_files(pr.owner, pr.repo, pr.number)
        except GitHubError as exc:
            self.logger.error("Failed to fetch PR files for %s/%s#%d: %s", pr.owner, pr.repo, pr.number, exc)
            return []

    def _comment_thread(self, owner: str, repo: str, number: int) -> str:
        try:
            comments = self.client.list_issue_comments(owner, repo, number)
        except GitHubError as exc:
            self.logger.error("Error fetching comment thread for %s/%s#%d: %s", owner, repo, number, exc)
            return "Unable to fetch previous comments."
        return render_comment_thread(
            [
                {
                    "author": (comment.get("user") or {}).get("login", "unknown"),
                    "created_at": comment.get("created_at", ""),
                    "body": comment.get("body") or "",
                }
                for comment in comments
            ]
        )


__all__ = [
    "Orchestrator",
    "PullRequest",
    "PullRequestOutcome",
    "SKIPPED_BOT",
    "SKIPPED_DRAFT",
    "SKIPPED_NO_GUIDELINES",
]
