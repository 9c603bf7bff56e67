"""Terminal claim review console."""

import asyncio
from typing import Callable

from dotenv import load_dotenv

from .domain.models.claim import StatusFilter
from .domain.models.notification import Notification
from .domain.services.claim_events import ClaimEventBus
from .domain.services.claim_review_service import (
    ClaimActionExecutor,
    ClaimReviewSession,
    ConfirmationDialog,
)
from .domain.services.claims_list_service import ClaimsListController
from .infrastructure.admin_api.http_adapter import HttpAdminAPIAdapter
from .infrastructure.config import AdminAPIConfig


class PrintNotifier:
    """Prints notifications as toasts."""

    def notify(self, notification: Notification) -> None:
        print(f"\n[{notification.variant.value}] {notification.title}: {notification.description}")


def print_list(controller: ClaimsListController) -> None:
    view = controller.view()
    print()
    if view.error_panel:
        print(f"{view.error_panel}: {view.error}")
        return
    if view.empty_state:
        print(f"{view.empty_state.title} - {view.empty_state.description}")
        return
    for i, row in enumerate(view.rows, 1):
        print(f"{i:>2}. {row.agency_name:<30} {row.requester_name:<25} {row.status_display:<13} {row.submitted}")
    if view.range_summary:
        print(f"\n{view.range_summary}  |  {view.page_label}")


def print_detail(session: ClaimReviewSession) -> None:
    detail = session.detail(with_domains=True)
    v = detail.verification
    print(f"\nClaim Request Review [{detail.status_display}]")
    print(f"Agency:   {detail.agency_name} {detail.agency_website or ''}")
    print(f"Email:    {detail.requester.business_email} "
          f"({'Domain Verified' if detail.requester.email_domain_verified else 'Domain Not Verified'})")
    if detail.show_phone:
        print(f"Phone:    {detail.requester.phone_number}")
    print(f"Position: {detail.requester.position_title or '-'}")
    print(f"\n{v.label.value}: {v.score_text}  (method: {v.verification_method.value})")
    for check in v.checks:
        print(f"  [{check.outcome.value:<6}] {check.label}: {check.description}")
    if v.recommendation:
        print(f"  Recommendation: {v.recommendation}")
    if detail.rejection_reason:
        print(f"\nRejection Reason: {detail.rejection_reason}")
    for link in detail.external_links:
        print(f"  {link.label}: {link.url}")
    print(f"\nSubmitted: {detail.submitted_at}  |  Claim ID: {detail.claim_id}")


async def reject(session: ClaimReviewSession, ask: Callable[[str], str] = input) -> None:
    """Run the rejection dialog until it is confirmed or cancelled.

    A valid reason that failed to send is kept so the reviewer can retry.
    """
    print(f"\n{session.rejection_title}")
    while session.dialog == ConfirmationDialog.REJECT:
        if session.rejection_form.is_valid:
            answer = ask("[Enter] retry, [e]dit reason, [c]ancel: ").strip().lower()
            if answer == "c":
                session.cancel_dialog()
                break
            if answer != "e":
                await session.confirm_reject()
                continue

        text = ask("Reason (empty to cancel): ")
        if not text.strip():
            session.cancel_dialog()
            break
        session.rejection_form.set_reason(text)
        print(session.rejection_form.counter_text)
        if not await session.confirm_reject() and session.rejection_form.error:
            print(session.rejection_form.error)


async def review(session: ClaimReviewSession) -> None:
    """Run one claim's review loop until it closes."""
    while session.is_open:
        print_detail(session)
        if not session.can_review:
            input("\nPress Enter to go back...")
            session.close()
            return

        choice = input("\n[a]pprove, [r]eject, [b]ack: ").strip().lower()
        if choice == "a":
            await session.request_approve()
            dialog = session.approval_dialog()
            print(f"\n{dialog.title}")
            for consequence in dialog.consequences:
                print(f"  - {consequence}")
            print(f"  {dialog.warning}")
            if input(f"{dialog.confirm_label}? [y/N]: ").strip().lower() == "y":
                await session.confirm_approve()
            else:
                session.cancel_dialog()
        elif choice == "r":
            await session.request_reject()
            await reject(session)
        elif choice == "b":
            session.close()


async def main():
    """Run the claim review console."""
    load_dotenv()
    print("Agency Admin Console - Claim Review")
    print("-----------------------------------")

    admin_api = HttpAdminAPIAdapter(config=AdminAPIConfig.from_env())
    await admin_api.initialize()

    notifier = PrintNotifier()
    event_bus = ClaimEventBus()
    controller = ClaimsListController(admin_api, notifier, event_bus)
    executor = ClaimActionExecutor(admin_api, event_bus)

    try:
        await controller.load()
        while True:
            print_list(controller)
            command = input(
                "\n[#] review, [n]ext, [p]rev, [s]earch, [f]ilter, [q]uit: "
            ).strip().lower()

            if command in ("q", "quit", "exit"):
                break
            elif command == "n":
                await controller.next_page()
            elif command == "p":
                await controller.previous_page()
            elif command == "s":
                await controller.set_search(input("Search: "))
            elif command == "f":
                options = ", ".join(f.value for f in StatusFilter)
                value = input(f"Status ({options}): ").strip() or "all"
                try:
                    await controller.set_status_filter(StatusFilter(value))
                except ValueError:
                    print(f"Unknown status: {value}")
            elif command.isdigit():
                index = int(command) - 1
                if 0 <= index < len(controller.claims):
                    await review(ClaimReviewSession(controller.claims[index], executor, notifier))
    finally:
        controller.detach()
        await admin_api.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
