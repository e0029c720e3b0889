"""
HireHiker Database Seeder

Resets the database and creates the "User Dashboard Bugs" problem with:
- Four project files (React components, a hook, an API module)
- Swagger-style API documentation
- Four bug tickets
"""

import sys
sys.path.insert(0, ".")

from hirehiker.db.session import SessionLocal, engine
from hirehiker.db.base import Base
from hirehiker.models import Analysis, CandidateSession, Difficulty, Message, Problem


PROJECT_FILES = [
    {
        "path": "src/components/Dashboard.tsx",
        "language": "typescript",
        "content": """import { useEffect } from 'react';
import { useUserStats } from '../hooks/useUserStats';
import { StatsCard } from './StatsCard';

export function Dashboard() {
  const { stats, loading, refetch } = useUserStats();

  // Refresh stats when component mounts
  useEffect(() => {
    refetch();
  }, []);

  if (loading) {
    return <div className="loading">Loading statistics...</div>;
  }

  return (
    <div className="dashboard">
      <h1>Dashboard</h1>
      <div className="stats-grid">
        <StatsCard title="Projects" value={stats?.projectCount || 0} icon="folder" />
        <StatsCard title="Tasks completed" value={stats?.completedTasks || 0} icon="check" />
        <StatsCard title="Active days" value={stats?.activeDays || 0} icon="calendar" />
        <StatsCard title="Team members" value={stats?.teamMembers || 0} icon="users" />
      </div>
      <div className="last-updated">
        Last updated: {stats?.lastUpdated || 'Never'}
      </div>
    </div>
  );
}""",
    },
    {
        "path": "src/components/ProfileForm.tsx",
        "language": "typescript",
        "content": """import { useState } from 'react';
import { updateUserProfile } from '../api/user';
import { useToast } from '../hooks/useToast';

interface ProfileFormProps {
  user: {
    id: string;
    name: string;
    email: string;
    bio: string;
  };
}

export function ProfileForm({ user }: ProfileFormProps) {
  const [name, setName] = useState(user.name);
  const [email, setEmail] = useState(user.email);
  const [bio, setBio] = useState(user.bio);
  const [saving, setSaving] = useState(false);
  const { showToast } = useToast();

  const handleSubmit = async (e: React.FormEvent) => {
    e.preventDefault();
    setSaving(true);

    try {
      updateUserProfile({ id: user.id, name, email, bio });
      showToast('Profile saved successfully!', 'success');
    } catch (error) {
      showToast('Failed to save', 'error');
    } finally {
      setSaving(false);
    }
  };

  return (
    <form onSubmit={handleSubmit} className="profile-form">
      <h2>Edit profile</h2>
      <input value={name} onChange={(e) => setName(e.target.value)} disabled={saving} />
      <input type="email" value={email} onChange={(e) => setEmail(e.target.value)} disabled={saving} />
      <textarea value={bio} onChange={(e) => setBio(e.target.value)} disabled={saving} rows={4} />
      <button type="submit" disabled={saving}>
        {saving ? 'Saving...' : 'Save'}
      </button>
    </form>
  );
}""",
    },
    {
        "path": "src/hooks/useUserStats.ts",
        "language": "typescript",
        "content": """import { useState, useEffect, useCallback } from 'react';

interface UserStats {
  projectCount: number;
  completedTasks: number;
  activeDays: number;
  teamMembers: number;
  lastUpdated: string;
}

export function useUserStats() {
  const [stats, setStats] = useState<UserStats | null>(null);
  const [loading, setLoading] = useState(true);

  const fetchStats = useCallback(async () => {
    try {
      const response = await fetch('/api/users/me/stats');
      const data = await response.json();
      setStats(data);
    } catch (error) {
      console.error('Failed to fetch stats:', error);
    } finally {
      setLoading(false);
    }
  }, []);

  useEffect(() => {
    fetchStats();
  }, []);

  const refetch = useCallback(() => {
    fetchStats();
  }, []);

  return { stats, loading, refetch };
}""",
    },
    {
        "path": "src/api/user.ts",
        "language": "typescript",
        "content": """const API_BASE = '/api';

interface UserProfile {
  id: string;
  name: string;
  email: string;
  bio: string;
}

export async function getCurrentUser(): Promise<UserProfile> {
  const response = await fetch(`${API_BASE}/users/me`);
  if (!response.ok) {
    throw new Error('Failed to fetch user');
  }
  return response.json();
}

export async function updateUserProfile(profile: UserProfile): Promise<void> {
  fetch(`${API_BASE}/users/me`, {
    method: 'PATCH',
    headers: { 'Content-Type': 'application/json' },
    body: JSON.stringify(profile),
  });
}

export async function getNotifications() {
  const response = await fetch(`${API_BASE}/notifications`);
  return response.json();
}

export async function markNotificationAsRead(notificationId: string) {
  const response = await fetch(`${API_BASE}/notifications/${notificationId}`, {
    method: 'PATCH',
    headers: { 'Content-Type': 'application/json' },
    body: JSON.stringify({ read: true }),
  });
  return response.json();
}""",
    },
]

SWAGGER_SPEC = {
    "title": "User Dashboard API",
    "version": "1.0.0",
    "baseUrl": "/api",
    "endpoints": [
        {
            "method": "GET",
            "path": "/users/me",
            "summary": "Get current user",
            "description": "Returns the profile of the logged-in user",
            "responseSchema": {
                "type": "object",
                "properties": {
                    "id": {"type": "string", "description": "User ID"},
                    "name": {"type": "string", "description": "Full name"},
                    "email": {"type": "string", "description": "Email address"},
                    "bio": {"type": "string", "description": "Short bio"},
                    "createdAt": {"type": "string", "description": "ISO 8601 date"},
                },
            },
        },
        {
            "method": "PATCH",
            "path": "/users/me",
            "summary": "Update profile",
            "description": "Updates the profile of the logged-in user. Changes are persisted to the database.",
            "parameters": [
                {"name": "name", "in": "body", "type": "string", "description": "New name"},
                {"name": "email", "in": "body", "type": "string", "description": "New email"},
                {"name": "bio", "in": "body", "type": "string", "description": "New bio"},
            ],
            "responseSchema": {
                "type": "object",
                "properties": {
                    "success": {"type": "boolean"},
                    "user": {"type": "object", "description": "Updated user data"},
                },
            },
        },
        {
            "method": "GET",
            "path": "/users/me/stats",
            "summary": "User statistics",
            "description": "Aggregated dashboard statistics, recomputed on every call.",
            "responseSchema": {
                "type": "object",
                "properties": {
                    "projectCount": {"type": "number", "description": "Number of projects"},
                    "completedTasks": {"type": "number", "description": "Completed tasks"},
                    "activeDays": {"type": "number", "description": "Active days"},
                    "teamMembers": {"type": "number", "description": "Team size"},
                    "lastUpdated": {"type": "string", "description": "ISO 8601 timestamp"},
                },
            },
        },
        {
            "method": "GET",
            "path": "/notifications",
            "summary": "Notifications",
            "description": "All notifications of the user, newest first",
            "responseSchema": {
                "type": "object",
                "properties": {
                    "notifications": {"type": "array", "description": "List of notifications"},
                    "unreadCount": {"type": "number", "description": "Number of unread notifications"},
                },
            },
        },
        {
            "method": "PATCH",
            "path": "/notifications/:id",
            "summary": "Mark as read",
            "description": "Marks a single notification as read",
            "parameters": [
                {"name": "id", "in": "path", "type": "string", "required": True, "description": "Notification ID"},
                {"name": "read", "in": "body", "type": "boolean", "required": True, "description": "Read status"},
            ],
            "responseSchema": {
                "type": "object",
                "properties": {
                    "success": {"type": "boolean"},
                    "notification": {"type": "object"},
                },
            },
        },
    ],
}

BUG_TICKETS = [
    {
        "id": "#201",
        "title": "Saving the profile does not work",
        "description": "Saving the profile shows 'success', but after a page refresh the changes are gone.",
        "relatedFiles": ["src/components/ProfileForm.tsx", "src/api/user.ts"],
    },
    {
        "id": "#202",
        "title": "Dashboard statistics are stale",
        "description": "Dashboard statistics never update and always show old values.",
        "relatedFiles": ["src/components/Dashboard.tsx", "src/hooks/useUserStats.ts"],
    },
    {
        "id": "#203",
        "title": "Badge counter does not update",
        "description": "Notifications: clicking 'Mark as read' leaves the badge count unchanged.",
        "relatedFiles": ["src/api/user.ts"],
    },
    {
        "id": "#204",
        "title": "Double-click saves twice",
        "description": "Clicking Save twice quickly saves the profile twice.",
        "relatedFiles": ["src/components/ProfileForm.tsx"],
    },
]

PROBLEM_DESCRIPTION = """## Your task

You are a developer at a startup and have been asked to investigate several bug reports from the issue tracker.

### What to do
1. **Analyze** the bug tickets on the left
2. **Investigate** the project code and the API documentation
3. **Discuss** with the AI to understand the root causes
4. **Ask questions** that show you understand the problem

### Important
- This is **not** about writing perfect code
- It is about asking **the right questions**
- Show how you approach problems **systematically**
- Explain your **reasoning** while debugging

### Examples of good questions
- "Why does X lead to problem Y?"
- "What happens if..."
- "How are these two components connected?"
- "Which edge cases could occur here?\""""


def seed_database():
    """Reset the database and insert the sample problem."""

    # Create all tables
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()

    try:
        print("Seeding database with User Dashboard bug investigation...")

        # Clear existing data (dependents first, no FK cascades)
        deleted = db.query(Analysis).delete()
        print(f"   - Cleared {deleted} analyses")
        deleted = db.query(Message).delete()
        print(f"   - Cleared {deleted} messages")
        deleted = db.query(CandidateSession).delete()
        print(f"   - Cleared {deleted} sessions")
        deleted = db.query(Problem).delete()
        print(f"   - Cleared {deleted} problems")

        problem = Problem(
            title="User Dashboard Bugs",
            description=PROBLEM_DESCRIPTION,
            codebase_context=None,
            difficulty=Difficulty.MEDIUM,
            category="debugging",
            project_files=PROJECT_FILES,
            swagger_spec=SWAGGER_SPEC,
            bug_tickets=BUG_TICKETS,
        )
        db.add(problem)

        # Commit all changes
        db.commit()

        print("✅ Database seeded successfully!")
        print(f"\n📋 Added: {problem.title}")
        print(f"   - {len(PROJECT_FILES)} project files")
        print(f"   - {len(SWAGGER_SPEC['endpoints'])} API endpoints")
        print(f"   - {len(BUG_TICKETS)} bug tickets")

    except Exception as e:
        db.rollback()
        print(f"❌ Error seeding database: {e}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    seed_database()
