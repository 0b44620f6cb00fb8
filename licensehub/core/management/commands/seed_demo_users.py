from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from licensehub.core.models import Role, Department

User = get_user_model()

DEMO_USERS = [
    # (name, email, role, department, position)
    ('Ava Owner', 'owner@licensehub.local', Role.ACCOUNT_OWNER, Department.ITSG, 'Account Owner'),
    ('Ian Admin', 'itsg.admin@licensehub.local', Role.ADMIN, Department.ITSG, 'Systems Administrator'),
    ('Mia Manager', 'itsg.manager@licensehub.local', Role.MANAGER, Department.ITSG, 'IT Manager'),
    ('Leo Lead', 'itsg.lead@licensehub.local', Role.TEAM_LEAD, Department.ITSG, 'IT Team Lead'),
    ('Eli Employee', 'itsg.employee@licensehub.local', Role.EMPLOYEE, Department.ITSG, 'IT Support'),
    ('Sam Lead', 'sre.lead@licensehub.local', Role.TEAM_LEAD, Department.SRE, 'SRE Team Lead'),
    ('Sol Engineer', 'sre.employee@licensehub.local', Role.EMPLOYEE, Department.SRE, 'Site Reliability Engineer'),
    ('Hana Admin', 'hr.admin@licensehub.local', Role.ADMIN, Department.HR, 'HR Administrator'),
    ('Fay Manager', 'finance.manager@licensehub.local', Role.MANAGER, Department.FINANCE, 'Finance Manager'),
    ('Finn Analyst', 'finance.analyst@licensehub.local', Role.FINANCE, Department.FINANCE, 'Finance Analyst'),
    ('Sid Employee', 'ssed.employee@licensehub.local', Role.EMPLOYEE, Department.SSED, 'Software Engineer'),
]

# Employees report to the team lead or manager of their department
MANAGER_BY_DEPARTMENT = {
    Department.ITSG: 'itsg.lead@licensehub.local',
    Department.SRE: 'sre.lead@licensehub.local',
    Department.FINANCE: 'finance.manager@licensehub.local',
}


class Command(BaseCommand):
    help = 'Create one demo user per role/department pair used in development'

    def add_arguments(self, parser):
        parser.add_argument(
            '--password',
            default='password123',
            help='Password given to every newly created demo user (default: password123)',
        )

    @transaction.atomic
    def handle(self, *args, **options):
        password = options['password']
        created_count = 0
        existing_count = 0

        for name, email, role, department, position in DEMO_USERS:
            user = User.objects.filter(email=email).first()
            if user:
                self.stdout.write(f'  User already exists: {email}')
                existing_count += 1
                continue

            User.objects.create_user(
                username=email,
                email=email,
                password=password,
                name=name,
                role=role,
                department=department,
                position=position,
            )
            self.stdout.write(self.style.SUCCESS(f'✓ Created {role} ({department}): {email}'))
            created_count += 1

        for name, email, role, department, position in DEMO_USERS:
            if role != Role.EMPLOYEE or department not in MANAGER_BY_DEPARTMENT:
                continue
            manager = User.objects.get(email=MANAGER_BY_DEPARTMENT[department])
            User.objects.filter(email=email, manager__isnull=True).update(manager=manager)

        self.stdout.write(self.style.SUCCESS(
            f'\nCompleted: {created_count} users created, {existing_count} users already existed'
        ))
