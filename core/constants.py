#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
MoodPulse - Static Lookup Tables
Справочники: настроения, активности, привычки, цели, достижения, триггеры
"""

from typing import Dict, List, Optional, Any

from core.models import Mood

# ===== MOODS =====

MOODS: List[Mood] = [
    Mood(id=1, name='awful', color='#FF4757', value=1, emoji='😢'),
    Mood(id=2, name='bad', color='#FF7F50', value=2, emoji='😕'),
    Mood(id=3, name='meh', color='#5DADE2', value=3, emoji='😐'),
    Mood(id=4, name='good', color='#58D68D', value=4, emoji='😊'),
    Mood(id=5, name='rad', color='#2ECC71', value=5, emoji='😄'),
]

def get_mood_by_id(mood_id: int) -> Optional[Mood]:
    return next((m for m in MOODS if m.id == mood_id), None)

def get_mood_by_value(value: int) -> Optional[Mood]:
    return next((m for m in MOODS if m.value == value), None)

# ===== ACTIVITIES =====

ACTIVITY_CATEGORIES = ['Work', 'Social', 'Health', 'Food', 'Entertainment', 'Intimacy', 'Other']

def _activity(name: str, icon: str, category: str, is_good: bool) -> Dict[str, Any]:
    return {'name': name, 'icon': icon, 'category': category, 'is_good': is_good}

DEFAULT_ACTIVITIES: List[Dict[str, Any]] = [
    _activity('Work', 'briefcase', 'Work', True),
    _activity('Meeting', 'users', 'Work', False),
    _activity('Deadline', 'clock', 'Work', False),

    _activity('Friends', 'heart', 'Social', True),
    _activity('Family', 'home', 'Social', True),
    _activity('Party', 'music', 'Social', True),
    _activity('Date', 'heart', 'Social', True),

    _activity('Exercise', 'activity', 'Health', True),
    _activity('Sleep', 'moon', 'Health', True),
    _activity('Sick', 'thermometer', 'Health', False),
    _activity('Doctor', 'stethoscope', 'Health', False),

    _activity('Cooking', 'chef-hat', 'Food', True),
    _activity('Restaurant', 'utensils', 'Food', True),
    _activity('Fast Food', 'pizza', 'Food', False),

    _activity('Movie', 'film', 'Entertainment', True),
    _activity('Reading', 'book', 'Entertainment', True),
    _activity('Gaming', 'gamepad-2', 'Entertainment', True),
    _activity('TV', 'tv', 'Entertainment', True),

    _activity('Solo Intimacy', 'heart', 'Intimacy', True),
    _activity('Couple Intimacy', 'heart', 'Intimacy', True),
    _activity('Romantic Time', 'heart', 'Intimacy', True),

    _activity('Shopping', 'shopping-bag', 'Other', True),
    _activity('Travel', 'plane', 'Other', True),
    _activity('Cleaning', 'spray-can', 'Other', False),
    _activity('Stress', 'zap', 'Other', False),
]

# ===== SLEEP TUTORIALS =====

SLEEP_TUTORIALS: List[Dict[str, Any]] = [
    {
        'id': 'breathing-4-7-8',
        'title': '4-7-8 Breathing Technique',
        'description': 'A simple breathing exercise to help you fall asleep faster',
        'type': 'breathing',
        'duration': 5,
        'instructions': [
            'Exhale completely through your mouth',
            'Close your mouth and inhale through your nose for 4 counts',
            'Hold your breath for 7 counts',
            'Exhale through your mouth for 8 counts',
            'Repeat this cycle 3-4 times',
        ],
    },
    {
        'id': 'sleep-hygiene-basics',
        'title': 'Sleep Hygiene Basics',
        'description': 'Essential habits for better sleep quality',
        'type': 'hygiene',
        'duration': 10,
        'instructions': [
            'Keep your bedroom cool (60-67°F)',
            'Make your room as dark as possible',
            'Avoid screens 1 hour before bed',
            'Stick to a consistent sleep schedule',
            'Avoid caffeine after 2 PM',
            'Create a relaxing bedtime routine',
        ],
    },
    {
        'id': 'progressive-muscle-relaxation',
        'title': 'Progressive Muscle Relaxation',
        'description': 'Systematically relax your entire body',
        'type': 'relaxation',
        'duration': 15,
        'instructions': [
            'Start with your toes - tense for 5 seconds, then relax',
            'Move to your calves, then thighs',
            'Continue with your abdomen and chest',
            'Tense and relax your arms and hands',
            'Finish with your neck and face muscles',
            'Notice the difference between tension and relaxation',
        ],
    },
    {
        'id': 'body-scan-meditation',
        'title': 'Body Scan Meditation',
        'description': 'Mindful awareness of your body to promote sleep',
        'type': 'meditation',
        'duration': 20,
        'instructions': [
            'Lie down comfortably and close your eyes',
            'Start by noticing your breath',
            'Slowly scan from the top of your head down',
            'Notice any sensations without judgment',
            'If your mind wanders, gently return to the body scan',
            'End by taking three deep breaths',
        ],
    },
]

# ===== HABIT LIBRARY =====

def _habit(habit_id: str, title: str, description: str, category: str,
           difficulty: str, frequency: str = 'daily') -> Dict[str, Any]:
    return {
        'id': habit_id,
        'title': title,
        'description': description,
        'category': category,
        'frequency': frequency,
        'difficulty': difficulty,
        'evidence_based': True,
    }

HABIT_LIBRARY: List[Dict[str, Any]] = [
    _habit('sleep_1', 'Go to bed at the same time every day',
           'Maintain a consistent sleep schedule to regulate your circadian rhythm', 'sleep', 'medium'),
    _habit('sleep_2', 'Create a bedtime routine',
           'Wind down with calming activities 30 minutes before sleep', 'sleep', 'easy'),
    _habit('sleep_3', 'Keep bedroom cool and dark',
           'Maintain optimal sleep environment (65-68°F, blackout curtains)', 'sleep', 'medium'),
    _habit('sleep_4', 'Screen-free hour before bed',
           'Avoid blue light exposure to promote natural melatonin production', 'sleep', 'hard'),
    _habit('sleep_5', 'Limit caffeine after 2 PM',
           'Avoid caffeine at least 6 hours before bedtime', 'sleep', 'medium'),

    _habit('mood_1', 'Write down 3 good things about your day',
           'Practice gratitude to boost positive emotions', 'mood', 'easy'),
    _habit('mood_2', 'Spend time in nature',
           'Get outside for at least 10 minutes daily', 'mood', 'easy'),
    _habit('mood_3', 'Connect with a friend or loved one',
           'Maintain social connections for emotional well-being', 'mood', 'easy'),
    _habit('mood_4', 'Practice self-compassion',
           'Speak to yourself kindly, especially during difficult times', 'mood', 'medium'),
    _habit('mood_5', 'Engage in creative activity',
           'Express yourself through art, music, writing, or other creative outlets', 'mood', 'medium', 'weekly'),

    _habit('anxiety_1', 'Try box breathing before meetings',
           'Inhale for 4, hold for 4, exhale for 4, hold for 4', 'anxiety', 'easy'),
    _habit('anxiety_2', 'Take 10-min walk at 6pm',
           'Physical activity helps reduce stress hormones', 'anxiety', 'easy'),
    _habit('anxiety_3', 'Practice progressive muscle relaxation',
           'Tense and release muscle groups to reduce physical tension', 'anxiety', 'medium', 'weekly'),
    _habit('anxiety_4', 'Limit news consumption',
           'Set specific times for checking news to avoid information overload', 'anxiety', 'medium'),
    _habit('anxiety_5', 'Write down worries',
           'Externalize anxious thoughts to reduce mental burden', 'anxiety', 'easy'),

    _habit('productivity_1', 'Plan your day the night before',
           'Set 3 priorities for the next day', 'productivity', 'medium'),
    _habit('productivity_2', 'Use time-blocking technique',
           'Schedule specific time slots for different tasks', 'productivity', 'hard'),
    _habit('productivity_3', 'Take 5-minute breaks every hour',
           'Prevent mental fatigue with regular micro-breaks', 'productivity', 'easy'),

    _habit('clarity_1', 'Do 2 mins of journaling in the morning',
           'Clear your mind with a morning brain dump', 'mentalClarity', 'easy'),
    _habit('clarity_2', '5-minute morning breathing exercise',
           'Start your day with focused breathing to improve mental clarity', 'mentalClarity', 'easy'),
    _habit('clarity_3', 'Single-task for 30 minutes',
           'Focus on one task without multitasking', 'mentalClarity', 'medium'),

    _habit('intimacy_1', 'Schedule intimate time',
           'Set aside dedicated time for connection with yourself or partner', 'intimacy', 'medium', 'weekly'),
    _habit('intimacy_2', 'Practice self-care rituals',
           'Engage in activities that make you feel good about yourself', 'intimacy', 'easy'),

    _habit('health_1', 'Drink water first thing in the morning',
           'Rehydrate after sleep to kickstart metabolism', 'health', 'easy'),
    _habit('health_2', 'Eat a vegetable with every meal',
           'Increase nutrient intake and fiber consumption', 'health', 'medium'),
]

HABIT_CATEGORIES = ['sleep', 'mood', 'anxiety', 'productivity', 'mentalClarity', 'intimacy', 'health']

def get_library_habit(habit_id: str) -> Optional[Dict[str, Any]]:
    return next((h for h in HABIT_LIBRARY if h['id'] == habit_id), None)

# ===== GOALS =====

def _goal(title: str, description: str, category: str, target_days: int) -> Dict[str, Any]:
    return {
        'title': title,
        'description': description,
        'type': 'preset',
        'category': category,
        'target_days': target_days,
    }

PRESET_GOALS: List[Dict[str, Any]] = [
    _goal('Get Fit', 'Exercise regularly to improve your physical health', 'fitness', 30),
    _goal('Build Habits', 'Establish positive daily routines', 'habits', 21),
    _goal('Live Healthier', 'Make healthier lifestyle choices', 'health', 30),
    _goal('Self Growth', 'Focus on personal development and learning', 'growth', 30),
    _goal('Reduce Anxiety', 'Practice mindfulness and stress management', 'anxiety', 21),
    _goal('Break Bad Habits', 'Eliminate negative behaviors from your life', 'habits', 30),
    _goal('Happy Love Life', 'Improve relationships and emotional connections', 'relationships', 30),
]

CHALLENGE_GOALS: List[Dict[str, Any]] = [
    _goal('7-Day Sleep Challenge', 'Sleep for 8 hours every night for a week', 'health', 7),
    _goal('30-Day Mood Tracking', 'Track your mood every day for a month', 'habits', 30),
    _goal('14-Day Exercise Streak', 'Exercise every day for two weeks', 'fitness', 14),
    _goal('21-Day Meditation', 'Meditate daily for three weeks', 'anxiety', 21),
]

GOAL_CATEGORIES = ['fitness', 'habits', 'health', 'growth', 'anxiety', 'relationships', 'custom']

# ===== ACHIEVEMENTS =====

ACHIEVEMENTS: List[Dict[str, str]] = [
    {'id': 'first_entry', 'title': 'First Steps', 'description': 'Log your first mood entry',
     'icon': '🎯', 'category': 'mood'},
    {'id': 'week_streak', 'title': 'Week Warrior', 'description': 'Track your mood for 7 consecutive days',
     'icon': '🔥', 'category': 'streak'},
    {'id': 'month_streak', 'title': 'Monthly Master', 'description': 'Track your mood for 30 consecutive days',
     'icon': '👑', 'category': 'streak'},
    {'id': 'happy_week', 'title': 'Happy Week', 'description': 'Have 7 consecutive days of good or excellent mood',
     'icon': '😊', 'category': 'mood'},
    {'id': 'activity_explorer', 'title': 'Activity Explorer', 'description': 'Try 10 different activities',
     'icon': '🌟', 'category': 'activities'},
    {'id': 'sleep_champion', 'title': 'Sleep Champion', 'description': 'Maintain good sleep quality for 14 days',
     'icon': '😴', 'category': 'mood'},
    {'id': 'clarity_master', 'title': 'Clarity Master', 'description': 'Complete 20 mental clarity tests',
     'icon': '🧠', 'category': 'mood'},
    {'id': 'goal_achiever', 'title': 'Goal Achiever', 'description': 'Complete your first goal',
     'icon': '🏆', 'category': 'goals'},
    {'id': 'habit_builder', 'title': 'Habit Builder', 'description': 'Complete 3 different goals',
     'icon': '🔨', 'category': 'goals'},
    {'id': 'consistency_king', 'title': 'Consistency King', 'description': 'Track mood for 100 consecutive days',
     'icon': '💎', 'category': 'streak'},
]

# ===== JOURNAL =====

JOURNAL_TEMPLATES: List[Dict[str, Any]] = [
    {
        'id': 'gratitude',
        'title': 'Gratitude Journal',
        'description': "Focus on what you're thankful for",
        'prompts': [
            'What are three things you are grateful for today?',
            'Who made a positive impact on your day?',
            'What simple pleasure brought you joy today?',
        ],
    },
    {
        'id': 'stress',
        'title': 'Stress Log',
        'description': 'Identify and process stressors',
        'prompts': [
            'What situations caused you stress today?',
            'How did you feel physically and emotionally?',
            'What coping strategies did you use?',
        ],
    },
    {
        'id': 'reflection',
        'title': 'Reflection Log',
        'description': 'Reflect on your day and growth',
        'prompts': [
            'What did you learn about yourself today?',
            'What would you do differently?',
            'What are you proud of accomplishing?',
        ],
    },
]

TRIGGERS: List[Dict[str, Any]] = [
    {'id': 'work', 'name': 'Work',
     'keywords': ['work', 'job', 'boss', 'colleague', 'deadline', 'meeting', 'project', 'office']},
    {'id': 'social', 'name': 'Social',
     'keywords': ['friend', 'family', 'relationship', 'social', 'party', 'date', 'conversation', 'interaction']},
    {'id': 'caffeine', 'name': 'Caffeine',
     'keywords': ['coffee', 'tea', 'caffeine', 'espresso', 'energy drink']},
    {'id': 'sleep', 'name': 'Sleep Issues',
     'keywords': ['sleep', 'insomnia', 'tired', 'fatigue', 'restless', 'awake']},
    {'id': 'health', 'name': 'Health',
     'keywords': ['health', 'pain', 'sick', 'illness', 'doctor', 'medication']},
    {'id': 'conflict', 'name': 'Conflict',
     'keywords': ['conflict', 'argue', 'fight', 'disagreement', 'tension']},
    {'id': 'relationship', 'name': 'Relationship',
     'keywords': ['relationship', 'partner', 'spouse', 'love', 'romance', 'intimate']},
    {'id': 'money', 'name': 'Money',
     'keywords': ['money', 'financial', 'debt', 'budget', 'expense', 'income']},
]

POSITIVE_WORDS = ['happy', 'good', 'great', 'excited', 'love', 'wonderful', 'amazing', 'joy', 'pleased']
NEGATIVE_WORDS = ['sad', 'angry', 'frustrated', 'worried', 'stressed', 'anxious', 'terrible', 'hate', 'awful']
