# =============================================================================
# core/services/onboarding_service.py - Sample Workspace Data
# =============================================================================
# Seeds an empty workspace with realistic applications (plus notes, tasks,
# contacts and links) so new users can explore the product.
# =============================================================================

import logging
from datetime import timedelta
from typing import Any

from sqlalchemy.orm import Session

from app.dependencies import RequestContext
from app.exceptions import BadRequestError
from core.models.common import AuditAction
from core.services.audit_service import AuditService
from core.services.plan_service import PlanService
from core.tables import AttachmentLink, Contact, JobApplication, Note, Task
from lib.database import utcnow

logger = logging.getLogger(__name__)

SAMPLE_APPLICATIONS: list[dict[str, Any]] = [
    {
        "company": "Google", "title": "Senior Software Engineer", "stage": "INTERVIEW",
        "location": "Mountain View, CA", "url": "https://careers.google.com/jobs/12345",
        "source": "LinkedIn", "salary_min": 180000, "salary_max": 250000,
        "tags": ["python", "distributed-systems", "big-tech"], "days_ago": 8,
        "notes": [
            "Had initial phone screen with recruiter. Very positive!",
            "Technical interview scheduled for next week.",
        ],
        "tasks": [("Prepare system design examples", 2)],
        "contacts": [("Sarah Chen", "sarah.chen@google.com", "Technical Recruiter")],
    },
    {
        "company": "Stripe", "title": "Full Stack Engineer", "stage": "APPLIED",
        "location": "Remote (US)", "url": "https://stripe.com/jobs/listing/full-stack",
        "source": "Company Website", "salary_min": 170000, "salary_max": 220000,
        "tags": ["typescript", "react", "fintech", "remote"], "days_ago": 3,
        "tasks": [("Follow up if no response by Friday", 4)],
    },
    {
        "company": "Shopify", "title": "Backend Developer", "stage": "OFFER",
        "location": "Remote", "url": "https://shopify.com/careers/backend",
        "source": "Referral", "salary_min": 150000, "salary_max": 180000,
        "tags": ["ruby", "rails", "remote", "ecommerce"], "days_ago": 21,
        "notes": ["Received offer! $165k base + equity. Need to respond by end of week."],
        "contacts": [("Mike Thompson", "mike.t@shopify.com", "Engineering Manager")],
    },
    {
        "company": "Microsoft", "title": "Software Engineer II", "stage": "INTERVIEW",
        "location": "Seattle, WA", "url": "https://careers.microsoft.com/swe2",
        "source": "LinkedIn", "salary_min": 145000, "salary_max": 195000,
        "tags": ["c#", "azure", "big-tech"], "days_ago": 14,
        "notes": ["Completed coding assessment. Waiting for on-site."],
        "tasks": [("Review Azure fundamentals", 5)],
    },
    {
        "company": "Airbnb", "title": "Frontend Engineer", "stage": "REJECTED",
        "location": "San Francisco, CA", "url": "https://careers.airbnb.com/frontend",
        "source": "Indeed", "salary_min": 160000, "salary_max": 210000,
        "tags": ["react", "typescript", "travel-tech"], "days_ago": 30,
        "notes": ["Rejected after final round. Feedback: Need more experience with large-scale React apps."],
    },
    {
        "company": "Notion", "title": "Product Engineer", "stage": "APPLIED",
        "location": "New York, NY", "url": "https://notion.so/careers/product-engineer",
        "source": "AngelList", "salary_min": 155000, "salary_max": 200000,
        "tags": ["typescript", "react", "productivity"], "days_ago": 5,
    },
    {
        "company": "Vercel", "title": "Developer Experience Engineer", "stage": "SAVED",
        "location": "Remote", "url": "https://vercel.com/careers/dx-engineer",
        "source": "Twitter", "salary_min": 140000, "salary_max": 180000,
        "tags": ["nextjs", "react", "devtools", "remote"], "days_ago": 0,
    },
    {
        "company": "Datadog", "title": "Site Reliability Engineer", "stage": "INTERVIEW",
        "location": "Boston, MA", "url": "https://datadog.com/careers/sre",
        "source": "Glassdoor", "salary_min": 165000, "salary_max": 215000,
        "tags": ["kubernetes", "python", "observability"], "days_ago": 10,
        "notes": ["First round complete. Moving to technical deep-dive."],
        "tasks": [("Study K8s networking concepts", 3)],
        "contacts": [("Lisa Park", "lisa.park@datadog.com", "Recruiter")],
    },
    {
        "company": "Plaid", "title": "API Platform Engineer", "stage": "APPLIED",
        "location": "San Francisco, CA", "url": "https://plaid.com/careers/api-platform",
        "source": "LinkedIn", "salary_min": 175000, "salary_max": 225000,
        "tags": ["golang", "api-design", "fintech"], "days_ago": 7,
    },
    {
        "company": "Figma", "title": "Software Engineer, Collaboration", "stage": "SAVED",
        "location": "San Francisco, CA", "url": "https://figma.com/careers/collab-eng",
        "source": "Company Website", "salary_min": 170000, "salary_max": 230000,
        "tags": ["typescript", "webrtc", "design-tools"], "days_ago": 1,
    },
    {
        "company": "Coinbase", "title": "Blockchain Engineer", "stage": "REJECTED",
        "location": "Remote", "url": "https://coinbase.com/careers/blockchain",
        "source": "LinkedIn", "salary_min": 180000, "salary_max": 260000,
        "tags": ["solidity", "web3", "crypto", "remote"], "days_ago": 45,
        "notes": ["Did not pass technical screen. Need to study smart contract patterns more."],
    },
    {
        "company": "Twilio", "title": "Senior Developer Advocate", "stage": "APPLIED",
        "location": "Remote", "url": "https://twilio.com/careers/dev-advocate",
        "source": "Twitter", "salary_min": 140000, "salary_max": 175000,
        "tags": ["devrel", "public-speaking", "api", "remote"], "days_ago": 2,
        "links": [("Portfolio Website", "https://myportfolio.dev")],
    },
    {
        "company": "Slack", "title": "Platform Engineer", "stage": "INTERVIEW",
        "location": "Denver, CO", "url": "https://slack.com/careers/platform",
        "source": "Referral", "salary_min": 155000, "salary_max": 200000,
        "tags": ["java", "microservices", "messaging"], "days_ago": 18,
        "notes": ["Referral from college friend working there. Had great culture chat."],
        "contacts": [("Jordan Smith", "jordan@slack.com", "Senior Engineer (Referrer)")],
    },
    {
        "company": "Linear", "title": "Founding Engineer", "stage": "SAVED",
        "location": "Remote", "url": "https://linear.app/careers",
        "source": "Hacker News", "salary_min": 160000, "salary_max": 200000,
        "tags": ["typescript", "react", "startup", "remote"], "days_ago": 0,
    },
    {
        "company": "Netflix", "title": "Senior UI Engineer", "stage": "APPLIED",
        "location": "Los Gatos, CA", "url": "https://jobs.netflix.com/ui-engineer",
        "source": "LinkedIn", "salary_min": 200000, "salary_max": 300000,
        "tags": ["react", "performance", "streaming", "big-tech"], "days_ago": 4,
    },
    {
        "company": "Neon", "title": "Database Engineer", "stage": "INTERVIEW",
        "location": "Remote", "url": "https://neon.tech/careers/db-engineer",
        "source": "GitHub", "salary_min": 150000, "salary_max": 190000,
        "tags": ["postgresql", "typescript", "open-source", "remote"], "days_ago": 12,
        "notes": ["Open source contributions helped. They liked my PR to the repo."],
        "tasks": [("Prepare Postgres internals presentation", 1)],
    },
    {
        "company": "Epic Games", "title": "Game Engine Developer", "stage": "SAVED",
        "location": "Cary, NC", "url": "https://epicgames.com/careers/engine-dev",
        "source": "Company Website", "salary_min": 130000, "salary_max": 180000,
        "tags": ["c++", "unreal", "gaming", "graphics"], "days_ago": 2,
    },
]

_APPLICATION_FIELDS = ("company", "title", "stage", "location", "url", "source", "salary_min", "salary_max", "tags")


class OnboardingService:

    @staticmethod
    def seed_sample_data(db: Session, user_id: str, ctx: RequestContext | None = None) -> int:
        """
        Create the sample applications and their children in one transaction.

        Returns:
            Number of applications created

        Raises:
            BadRequestError: The workspace already has applications
        """
        if PlanService.count_applications(db, user_id) > 0:
            raise BadRequestError("Sample data can only be added to an empty workspace.")

        now = utcnow()
        for sample in SAMPLE_APPLICATIONS:
            values = {field: sample[field] for field in _APPLICATION_FIELDS}
            values["tags"] = list(values["tags"])
            applied = now - timedelta(days=sample["days_ago"]) if sample["stage"] != "SAVED" else None
            app = JobApplication(user_id=user_id, applied_date=applied, **values)
            db.add(app)
            db.flush()

            for content in sample.get("notes", []):
                db.add(Note(user_id=user_id, application_id=app.id, content=content))
            for title, due_in_days in sample.get("tasks", []):
                db.add(Task(
                    user_id=user_id,
                    application_id=app.id,
                    title=title,
                    status="OPEN",
                    due_date=now + timedelta(days=due_in_days),
                ))
            for name, email, role in sample.get("contacts", []):
                db.add(Contact(
                    user_id=user_id,
                    application_id=app.id,
                    name=name,
                    email=email,
                    role=role,
                    company=sample["company"],
                ))
            for label, url in sample.get("links", []):
                db.add(AttachmentLink(user_id=user_id, application_id=app.id, label=label, url=url))

        db.commit()
        created = len(SAMPLE_APPLICATIONS)
        logger.info(f"Seeded {created} sample applications for user {user_id}")

        AuditService.record(
            db, user_id, AuditAction.APPLICATION_CREATED,
            entity_type="JobApplication", meta={"via": "sample_data_seed", "created": created}, ctx=ctx,
        )
        return created
