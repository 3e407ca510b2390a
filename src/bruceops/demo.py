"""Canned data served to demo sessions instead of calling the API."""

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

DEMO_USER_ID = "demo-user"


def _days_ago(days: int, now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return (now - timedelta(days=days)).isoformat()


def demo_logs(now: Optional[datetime] = None) -> list[dict[str, Any]]:
    now = now or datetime.now(timezone.utc)
    return [
        {
            "id": 1,
            "userId": DEMO_USER_ID,
            "date": now.date().isoformat(),
            "createdAt": now.isoformat(),
            "energy": 7,
            "stress": 4,
            "mood": 8,
            "focus": 7,
            "sleepQuality": 8,
            "connection": 6,
            "spiritualAlignment": 7,
            "viceVaping": False,
            "viceAlcohol": False,
            "viceJunkFood": True,
            "viceDoomScrolling": False,
            "viceLateScreens": True,
            "viceSkippedMeals": False,
            "viceExcessCaffeine": True,
            "dayType": "work",
            "primaryEmotion": "focused",
            "winCategory": "productivity",
            "timeDrain": "meetings",
            "topWin": "Completed the feature overhaul for BruceOps",
            "topFriction": "Too many context switches between tasks",
            "tomorrowFocus": "Deploy to production and test everything",
            "familyConnection": "Had dinner together as a family",
            "faithAlignment": "Morning prayer and gratitude practice",
            "driftCheck": "Staying aligned with priorities",
        }
    ]


def demo_ideas(now: Optional[datetime] = None) -> list[dict[str, Any]]:
    return [
        {
            "id": 1,
            "userId": DEMO_USER_ID,
            "title": "AI-Powered Daily Journaling",
            "pitch": "Build a journaling app that uses AI to identify patterns and provide "
                     "insights on emotional trends over time.",
            "category": "tech",
            "captureMode": "deep",
            "status": "promoted",
            "audience": "Busy professionals who want self-improvement",
            "painPoint": "Hard to maintain consistent journaling habits",
            "excitement": 9,
            "feasibility": 7,
            "tinyTest": "Create a simple prompt-based journal for one week",
            "realityCheck": {"decision": "Strong potential. Personal development market is growing. Start with MVP."},
            "milestones": ["Design UI", "Build backend", "Add AI analysis"],
            "createdAt": _days_ago(7, now),
        },
        {
            "id": 2,
            "userId": DEMO_USER_ID,
            "title": "Family Adventure Tracker",
            "pitch": "An app to plan, track, and remember family adventures and outdoor activities.",
            "category": "family",
            "captureMode": "quick",
            "status": "draft",
            "tinyTest": "Track next 3 family outings manually",
            "createdAt": _days_ago(3, now),
        },
        {
            "id": 3,
            "userId": DEMO_USER_ID,
            "title": "Scripture Memory System",
            "pitch": "Spaced repetition system specifically designed for memorizing Bible verses with context.",
            "category": "faith",
            "captureMode": "quick",
            "status": "reality-checked",
            "realityCheck": {"decision": "Good personal project. Could help others in faith community."},
            "createdAt": _days_ago(14, now),
        },
    ]


def demo_content(now: Optional[datetime] = None) -> list[dict[str, Any]]:
    return [
        {
            "id": 1,
            "userId": DEMO_USER_ID,
            "contentType": "social",
            "tone": "inspirational",
            "template": "adventure-call",
            "topic": "Weekend hiking adventures",
            "generatedContent": "The trail calls to those who listen. This weekend, we ventured into the "
                                "wild and found more than just beautiful views - we found ourselves. "
                                "#HarrisWildlands #FamilyAdventure #NatureHeals",
            "createdAt": _days_ago(2, now),
        }
    ]


def demo_dashboard() -> dict[str, Any]:
    return {"logsToday": 1, "openLoops": 2, "driftFlags": 0, "aiCalls": 5}


def get_demo_data(url: str) -> Any:
    """
    Canned response for a read of ``url`` in demo mode.

    Matching is by substring, first match wins; unmatched URLs get an
    empty list.
    """
    if "/api/logs" in url:
        return demo_logs()
    if "/api/ideas" in url:
        return demo_ideas()
    if "/api/harris-content" in url:
        return demo_content()
    if "/api/lessons" in url:
        return []
    if "/api/dashboard" in url:
        return demo_dashboard()
    return []
