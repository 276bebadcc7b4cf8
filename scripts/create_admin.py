#!/usr/bin/env python
"""
Script to create an admin member, or grant admin to existing members.

Usage:
    python scripts/create_admin.py admin@example.com [other@example.com ...] --password secret
"""
import argparse

from gymapp import create_app, db
from gymapp.models import Member


def ensure_admin(email, password, name):
    """
    Create the member as an admin, or promote an existing member.

    Returns:
        str: What was done
    """
    member = Member.find_by_email(email)
    if member is None:
        member = Member(name=name or email.split('@')[0], email=email, password=password, is_admin=True)
        db.session.add(member)
        db.session.commit()
        return f'Admin member created with ID: {member.id}'

    if member.is_admin:
        return f'Member {member.id} already has admin privileges'

    member.is_admin = True
    db.session.commit()
    return f'Updated member ID: {member.id} with admin privileges'


def main():
    parser = argparse.ArgumentParser(description='Create or promote admin members')
    parser.add_argument('emails', nargs='+', help='Admin email addresses')
    parser.add_argument('--password', default='admin123', help='Password for newly created admins')
    parser.add_argument('--name', default=None, help='Display name for newly created admins')
    args = parser.parse_args()

    app = create_app()
    with app.app_context():
        db.create_all()
        done = 0
        for email in args.emails:
            print(f'{email}: {ensure_admin(email, args.password, args.name)}')
            done += 1
        print(f'Processed {done} of {len(args.emails)} admin emails')


if __name__ == '__main__':
    main()
