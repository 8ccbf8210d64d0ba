"""Catalog seed data loaded into every new entity store."""

from typing import Any, Dict, List

MINDFULNESS_SESSIONS: List[Dict[str, Any]] = [
    {
        "title": "Morning Meditation",
        "description": (
            "Start your day with clarity and intention. This meditation helps you "
            "set a positive tone for the day ahead."
        ),
        "duration": 10,
        "audio_url": "https://mindfulnessapp.com/audio/morning-meditation.mp3",
        "is_premium": False,
    },
    {
        "title": "Anxiety Relief",
        "description": (
            "A guided practice to help reduce feelings of anxiety and stress, "
            "focusing on deep breathing and body awareness."
        ),
        "duration": 15,
        "audio_url": "https://mindfulnessapp.com/audio/anxiety-relief.mp3",
        "is_premium": False,
    },
    {
        "title": "Deep Sleep Guide",
        "description": (
            "Fall asleep faster with this calming meditation designed to quiet the "
            "mind and prepare your body for restful sleep."
        ),
        "duration": 30,
        "audio_url": "https://mindfulnessapp.com/audio/deep-sleep.mp3",
        "is_premium": True,
    },
    {
        "title": "Focus & Concentration",
        "description": (
            "Enhance your ability to focus and concentrate with this mindfulness "
            "practice for mental clarity."
        ),
        "duration": 12,
        "audio_url": "https://mindfulnessapp.com/audio/focus.mp3",
        "is_premium": False,
    },
    {
        "title": "Body Scan Relaxation",
        "description": (
            "A guided body scan meditation to release tension and promote deep "
            "relaxation throughout your body."
        ),
        "duration": 20,
        "audio_url": "https://mindfulnessapp.com/audio/body-scan.mp3",
        "is_premium": False,
    },
    {
        "title": "Advanced Mindfulness",
        "description": (
            "For experienced practitioners, this session explores advanced "
            "mindfulness techniques for deeper awareness."
        ),
        "duration": 25,
        "audio_url": "https://mindfulnessapp.com/audio/advanced.mp3",
        "is_premium": True,
    },
]

REFLECTION_PROMPTS: List[Dict[str, Any]] = [
    {
        "prompt": (
            "What made you smile today? Take a moment to reflect on a positive "
            "experience, no matter how small."
        ),
        "is_premium": False,
    },
    {
        "prompt": "List three things you're grateful for today and why they matter to you.",
        "is_premium": False,
    },
    {
        "prompt": (
            "Think about a challenge you're facing. What strengths and resources do "
            "you have to help you overcome it?"
        ),
        "is_premium": True,
    },
    {
        "prompt": (
            "Reflect on a recent interaction that affected you emotionally. What "
            "triggered your response and what might you learn from it?"
        ),
        "is_premium": True,
    },
    {
        "prompt": "What is one small step you can take today toward a goal that matters to you?",
        "is_premium": False,
    },
    {
        "prompt": (
            "Consider a relationship in your life. How might you nurture it with "
            "intention this week?"
        ),
        "is_premium": False,
    },
    {
        "prompt": (
            "Explore a belief or thought pattern that may be limiting you. How might "
            "you reframe it in a more empowering way?"
        ),
        "is_premium": True,
    },
]
