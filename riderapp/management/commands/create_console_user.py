"""
Management command to create console users with a specific role.

The user is created in the RiderApp backend through the admin settings
endpoint, so an admin account is needed to sign in first.

Usage:
    python manage.py create_console_user --admin-email admin@company.com --name "Sara" --email sara@company.com --role manager
"""

import getpass

from django.core.management.base import BaseCommand, CommandError

from riderapp.exceptions import BackendError
from riderapp.navigation import visible_menu
from riderapp.services.api_client import RiderApiClient
from riderapp.services.authentication import sign_in
from riderapp.session import Role, SessionStore


class Command(BaseCommand):
    help = 'Create a new console user with a specific role'

    def add_arguments(self, parser):
        parser.add_argument(
            '--admin-email',
            type=str,
            required=True,
            help='Email of an admin account used to create the user'
        )
        parser.add_argument(
            '--admin-password',
            type=str,
            help='Password of the admin account (will prompt if not provided)'
        )
        parser.add_argument(
            '--name',
            type=str,
            required=True,
            help='Full name of the new user'
        )
        parser.add_argument(
            '--email',
            type=str,
            required=True,
            help='Email address for the new user'
        )
        parser.add_argument(
            '--password',
            type=str,
            help='Password for the new user (will prompt if not provided)'
        )
        parser.add_argument(
            '--role',
            type=str,
            choices=Role.values,
            default=Role.STAFF,
            help='Role to assign to the user'
        )

    def handle(self, *args, **options):
        admin_password = options.get('admin_password') or getpass.getpass('Admin password: ')
        password = options.get('password') or self._get_password()

        store = SessionStore({})
        client = RiderApiClient.from_settings()

        try:
            sign_in(store, client, options['admin_email'], admin_password)
        except (BackendError, ValueError) as e:
            raise CommandError(f'Admin login failed: {e}')

        if not store.is_admin():
            store.logout(client)
            raise CommandError(f'"{options["admin_email"]}" is not an admin account')

        client.token = store.access_token
        try:
            client.create_console_user({
                'name': options['name'],
                'email': options['email'],
                'role': options['role'],
                'password': password,
            })
        except BackendError as e:
            raise CommandError(f'Error creating user: {e}')
        finally:
            store.logout(client)

        self.stdout.write(
            self.style.SUCCESS(f'Successfully created user "{options["email"]}"')
        )
        self._display_user_summary(options['email'], Role(options['role']))

    def _get_password(self):
        """Get password from user input with confirmation."""
        while True:
            password = getpass.getpass('Password: ')
            if not password:
                self.stdout.write(self.style.ERROR('Password cannot be empty'))
                continue

            password_confirm = getpass.getpass('Password (again): ')

            if password != password_confirm:
                self.stdout.write(self.style.ERROR("Passwords don't match"))
                continue

            return password

    def _display_user_summary(self, email, role):
        """Display the screens the new user can open."""
        preview = SessionStore({})
        preview.login(email, role)

        self.stdout.write(self.style.SUCCESS('\n=== User Created Successfully ==='))
        self.stdout.write(f'Email: {email}')
        self.stdout.write(f'Role: {role.label}')

        self.stdout.write('\n=== Console Access ===')
        for group in visible_menu(preview):
            self.stdout.write(f'{group["title"]}:')
            for item in group['items']:
                self.stdout.write(f'  - {item["title"]}')

        self.stdout.write(self.style.SUCCESS('\n=== Creation Complete ==='))
