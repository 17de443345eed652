from __future__ import annotations

import asyncio
import json
import logging
import random
from datetime import datetime
from typing import Callable, Dict, List, Optional

from sqlmodel import Session

from backend.app.config import settings
from backend.app.models import FindingStatus, Scan, ScanResult, ScanStatus, ScanType, Severity
from backend.app.services.notification_service import NotificationService

from .ai_analysis import AIAnalyzer
from .findings import count_open, findings_payload, synthesize_findings

logger = logging.getLogger("vulnsentry.lifecycle")

AI_SUMMARY_TYPES = (ScanType.AI, ScanType.WEB)


class ScanLifecycleManager:
    """Drives scans from ``pending`` to a terminal state.

    One asyncio task per scan sleeps through the pending and in-progress
    phases and then records findings. Every step opens its own session from
    ``session_factory`` and re-reads the scan, so a scan cancelled through the
    API is never overwritten.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        analyzer: Optional[AIAnalyzer] = None,
        pending_delay: Optional[float] = None,
        progress_delay: Optional[float] = None,
        rng: Optional[random.Random] = None,
    ):
        self.session_factory = session_factory
        self.analyzer = analyzer or AIAnalyzer()
        self.pending_delay = settings.scan_pending_delay if pending_delay is None else pending_delay
        self.progress_delay = settings.scan_progress_delay if progress_delay is None else progress_delay
        self.rng = rng or random.Random()
        self._tasks: Dict[str, asyncio.Task] = {}

    @property
    def active_scan_ids(self) -> List[str]:
        return list(self._tasks)

    def start(self, scan_id: str, user_id: Optional[str] = None) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(self.run(scan_id, user_id), name=f"scan-{scan_id}")
        self._tasks[scan_id] = task
        task.add_done_callback(lambda _: self._tasks.pop(scan_id, None))
        logger.info("Scan %s registered", scan_id)
        return task

    def cancel(self, scan_id: str) -> bool:
        task = self._tasks.pop(scan_id, None)
        if task is None:
            return False
        task.cancel()
        logger.info("Scan %s task cancelled", scan_id)
        return True

    async def shutdown(self) -> None:
        tasks = list(self._tasks.values())
        self._tasks.clear()
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.info("Cancelled %d outstanding scan tasks", len(tasks))

    async def run(self, scan_id: str, user_id: Optional[str] = None) -> None:
        try:
            await asyncio.sleep(self.pending_delay)
            if not self._advance(scan_id):
                return
            await asyncio.sleep(self.progress_delay)
            await self._complete(scan_id, user_id or settings.default_user_id)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Scan %s failed during lifecycle", scan_id)
            self._mark_failed(scan_id)

    def _advance(self, scan_id: str) -> bool:
        with self.session_factory() as session:
            scan = session.get(Scan, scan_id)
            if scan is None or ScanStatus(scan.status).is_terminal:
                return False
            scan.status = ScanStatus.IN_PROGRESS.value
            session.add(scan)
            session.commit()
        logger.info("Scan %s is in_progress", scan_id)
        return True

    async def _complete(self, scan_id: str, user_id: str) -> None:
        with self.session_factory() as session:
            scan = session.get(Scan, scan_id)
            if scan is None or ScanStatus(scan.status).is_terminal:
                return
            results = synthesize_findings(scan.id, self.rng)
            open_count = count_open(results)
            scan_type = ScanType(scan.scan_type)

            summary = f"Scan completed. Found {open_count} open vulnerabilities."
            ai_analysis: Dict = {}
            degraded = False
            if scan_type in AI_SUMMARY_TYPES:
                payload = json.dumps(findings_payload(results))
                summarized = await self.analyzer.summarize_findings(payload)
                summary = summarized.data.summary
                degraded = summarized.degraded
                if scan_type == ScanType.AI:
                    enhanced = await self.analyzer.enhance_report(payload)
                    ai_analysis = enhanced.data.model_dump(mode="json")
                    degraded = degraded or enhanced.degraded

            session.refresh(scan)
            if ScanStatus(scan.status).is_terminal:
                return
            session.add_all(results)
            scan.status = ScanStatus.COMPLETED.value
            scan.completed_at = datetime.utcnow()
            scan.vulnerabilities_found = open_count
            scan.summary = summary
            scan.ai_analysis_json = json.dumps(ai_analysis)
            scan.ai_degraded = degraded
            session.add(scan)
            self._notify(session, scan, results, user_id)
            session.commit()
        logger.info(
            "Scan %s completed with %d open findings%s",
            scan_id,
            open_count,
            " (AI degraded)" if degraded else "",
        )

    def _notify(self, session: Session, scan: Scan, results: List[ScanResult], user_id: str) -> None:
        notifications = NotificationService(session)
        link = f"/devices/{scan.device_id}"
        notifications.create(
            user_id=user_id,
            type="scan_completed",
            title="Scan completed",
            message=f"{scan.scan_type.upper()} scan of {scan.device_name or scan.device_id} finished: "
            f"{scan.vulnerabilities_found} open vulnerabilities.",
            link=link,
            commit=False,
        )
        critical = [
            result
            for result in results
            if result.severity == Severity.CRITICAL.value and result.status == FindingStatus.OPEN.value
        ]
        if critical:
            notifications.create(
                user_id=user_id,
                type="critical_alert",
                title="Critical vulnerability detected",
                message=f"{scan.device_name or scan.device_id}: " + ", ".join(r.finding for r in critical),
                link=link,
                commit=False,
            )

    def _mark_failed(self, scan_id: str) -> None:
        with self.session_factory() as session:
            scan = session.get(Scan, scan_id)
            if scan is None or ScanStatus(scan.status).is_terminal:
                return
            scan.status = ScanStatus.FAILED.value
            scan.completed_at = datetime.utcnow()
            session.add(scan)
            session.commit()
        logger.warning("Scan %s marked failed", scan_id)
