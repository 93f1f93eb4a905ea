"""Playback analytics ingestion, view counting and aggregation."""

from __future__ import annotations

import logging
import uuid
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, Optional

from fastapi import HTTPException
from sqlalchemy import func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from config import settings
from models.call_to_action import CallToAction
from models.video import Video
from models.video_analytics import VideoAnalytics
from services.access import Principal, require_video_access, require_video

logger = logging.getLogger(__name__)

UNKNOWN = "unknown"


def client_ip_from_headers(headers: Any, peer_host: Optional[str] = None) -> str:
    forwarded = headers.get("x-forwarded-for") if headers is not None else None
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    if peer_host:
        return peer_host
    return UNKNOWN


def client_country_from_headers(headers: Any) -> str:
    header_name = (settings.ANALYTICS_COUNTRY_HEADER or "").strip()
    if not header_name or headers is None:
        return UNKNOWN
    value = str(headers.get(header_name) or "").strip().upper()
    return value or UNKNOWN


def summarize_samples(samples: Iterable[VideoAnalytics]) -> Dict[str, Any]:
    """Means over all samples and per-country sample counts.

    No samples yields zero averages with ``sample_count == 0`` rather than NaN.
    """
    rows = list(samples)
    count = len(rows)
    if count == 0:
        return {
            "sample_count": 0,
            "average_watch_time": 0.0,
            "average_watch_percentage": 0.0,
            "views_by_country": {},
        }

    total_time = sum(float(row.watch_time or 0.0) for row in rows)
    total_percentage = sum(float(row.watch_percentage or 0.0) for row in rows)
    by_country = Counter(row.viewer_country or UNKNOWN for row in rows)
    return {
        "sample_count": count,
        "average_watch_time": total_time / count,
        "average_watch_percentage": total_percentage / count,
        "views_by_country": dict(by_country),
    }


def serialize_sample(row: VideoAnalytics) -> Dict[str, Any]:
    return {
        "id": row.id,
        "watch_time": float(row.watch_time or 0.0),
        "watch_percentage": float(row.watch_percentage or 0.0),
        "viewer_country": row.viewer_country,
        "viewed_at": row.viewed_at.isoformat() if row.viewed_at else None,
    }


async def _has_recent_sample(
    video_id: str,
    viewer_ip: str,
    since: datetime,
    db: AsyncSession,
) -> bool:
    result = await db.execute(
        select(VideoAnalytics.id)
        .where(
            VideoAnalytics.video_id == video_id,
            VideoAnalytics.viewer_ip == viewer_ip,
            VideoAnalytics.viewed_at >= since,
        )
        .limit(1)
    )
    return result.scalar_one_or_none() is not None


async def record_view_sample(
    video_id: str,
    *,
    watch_time: float,
    watch_percentage: float,
    viewer_ip: str,
    viewer_country: str,
    db: AsyncSession,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Append one playback sample and count a view once per IP per window."""
    video = await require_video(video_id, db)
    current = now or datetime.now(timezone.utc)
    window = timedelta(hours=max(int(settings.ANALYTICS_VIEW_DEDUP_HOURS), 0))
    ip = viewer_ip or UNKNOWN

    # Check and insert must not interleave for the same video and IP.
    if db.bind is not None and db.bind.dialect.name == "postgresql":
        await db.execute(select(func.pg_advisory_xact_lock(func.hashtext(f"{video.id}:{ip}"))))
    counted_view = not await _has_recent_sample(video.id, ip, current - window, db)

    db.add(
        VideoAnalytics(
            id=str(uuid.uuid4()),
            video_id=video.id,
            watch_time=float(watch_time),
            watch_percentage=float(watch_percentage),
            viewer_ip=ip,
            viewer_country=viewer_country or UNKNOWN,
            viewed_at=current,
        )
    )
    if counted_view:
        await db.execute(
            update(Video)
            .where(Video.id == video.id)
            .values(views=Video.views + 1)
            .execution_options(synchronize_session=False)
        )
    await db.commit()
    return {"success": True, "counted_view": counted_view}


async def get_video_analytics(
    principal: Optional[Principal],
    video_id: str,
    db: AsyncSession,
) -> Dict[str, Any]:
    video = await require_video_access(principal, video_id, db)

    result = await db.execute(
        select(VideoAnalytics)
        .where(VideoAnalytics.video_id == video.id)
        .order_by(VideoAnalytics.viewed_at.desc())
    )
    samples = result.scalars().all()

    views_result = await db.execute(select(Video.views).where(Video.id == video.id))
    payload = summarize_samples(samples)
    payload["total_views"] = int(views_result.scalar() or 0)
    payload["analytics"] = [serialize_sample(row) for row in samples]
    return payload


async def record_cta_click(video_id: str, db: AsyncSession) -> Dict[str, Any]:
    """Increment the CTA click counter in a single UPDATE."""
    result = await db.execute(
        update(CallToAction)
        .where(CallToAction.video_id == video_id)
        .values(clicks=CallToAction.clicks + 1)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        await db.rollback()
        raise HTTPException(status_code=404, detail="CTA not found")
    await db.commit()

    clicks_result = await db.execute(select(CallToAction.clicks).where(CallToAction.video_id == video_id))
    return {"success": True, "clicks": int(clicks_result.scalar() or 0)}
