#!/usr/bin/env python
"""
Script to create demo members with a mix of membership scenarios:
- members with an active plan
- members whose plan has run out
- members whose plan was discontinued
- members that never bought a plan
"""
import argparse
import random
from datetime import timedelta

from faker import Faker

from gymapp import create_app, db
from gymapp.api import get_engine
from gymapp.models import AttendanceRecord, Member

fake = Faker()

SCENARIOS = ('active', 'expired', 'discontinued', 'pending')


def create_member(index):
    name = fake.name()
    email = f"{fake.user_name()}_{index}@{fake.domain_name()}"
    member = Member(
        name=name,
        email=email,
        password=fake.password(length=12),
        phone=fake.phone_number()[:30],
        gender=random.choice(['male', 'female', 'other']),
        height_cm=round(random.uniform(150, 195), 1),
        weight_kg=round(random.uniform(50, 110), 1),
    )
    db.session.add(member)
    db.session.commit()
    return member


def apply_scenario(engine, member, scenario):
    """Give a member memberships and visits matching the scenario."""
    today = engine.today()
    plan = random.choice(engine.catalog.ids())

    if scenario == 'active':
        engine.create_membership(member.id, plan, today - timedelta(days=random.randint(0, 20)), is_admin=True)
        for days_ago in range(random.randint(1, 10)):
            day = today - timedelta(days=days_ago)
            db.session.add(AttendanceRecord(member_id=member.id, attendance_date=day,
                                            check_in_time=engine.clock() - timedelta(days=days_ago)))
        db.session.commit()
    elif scenario == 'expired':
        engine.create_membership(member.id, plan, today - timedelta(days=400), is_admin=True)
    elif scenario == 'discontinued':
        engine.create_membership(member.id, plan, today - timedelta(days=10), is_admin=True)
        engine.discontinue_membership(member.id, is_admin=True)


def main():
    parser = argparse.ArgumentParser(description='Create demo members')
    parser.add_argument('--count', type=int, default=40, help='Number of members to create')
    args = parser.parse_args()

    app = create_app()
    with app.app_context():
        db.create_all()
        engine = get_engine()
        counts = {scenario: 0 for scenario in SCENARIOS}

        for index in range(args.count):
            scenario = SCENARIOS[index % len(SCENARIOS)]
            apply_scenario(engine, create_member(index), scenario)
            counts[scenario] += 1

        print(f"Created {args.count} members: " + ", ".join(f"{k}={v}" for k, v in counts.items()))


if __name__ == '__main__':
    main()
