"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from django.contrib.auth.hashers import make_password
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from bizbox.catalog.models import Category, Product, ProductVariant
from bizbox.pricing.models import Discount
from bizbox.contacts.models import Contact
from bizbox.teams.models import TeamMember
from bizbox.food_delivery.models import Restaurant, MenuCategory, MenuItem
from bizbox.cart import services as cart_services
from bizbox.queues.models import QueueType
from bizbox.jobs.models import JobBoard, Job
from bizbox.courses.models import Course, Lesson
from bizbox.genealogy.models import FamilyMember
from bizbox.payroll.models import Employee, PayrollPeriod
from bizbox.content.models import Post
from bizbox.subscriptions.models import SubscriptionPlan, UserSubscription
from datetime import date, timedelta
from django.utils import timezone
from decimal import Decimal
import random
import string

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(username=None, email=None, password='testpass123', is_staff=False, is_superuser=False):
        """Create a test user (a tenant owner)"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username}@test.com'
        return User.objects.create_user(
            username=username,
            email=email,
            password=password,
            is_staff=is_staff,
            is_superuser=is_superuser
        )

    @staticmethod
    def create_category(user, name=None):
        if not name:
            name = f'Category_{TestDataFactory.random_string(6)}'
        return Category.objects.create(client_identifier=user.identifier, name=name)

    @staticmethod
    def create_product(user, name=None, price=None, quantity=10, category=None, track_inventory=True,
                       discount_price=None):
        """Create a test product with stock"""
        if not name:
            name = f'Product_{TestDataFactory.random_string(6)}'
        return Product.objects.create(
            client_identifier=user.identifier,
            name=name,
            sku=f'SKU_{TestDataFactory.random_string(8)}',
            category=category,
            price=price if price is not None else Decimal('100.00'),
            discount_price=discount_price,
            quantity=quantity,
            track_inventory=track_inventory
        )

    @staticmethod
    def create_variant(product, attributes=None, price=None, quantity=5):
        return ProductVariant.objects.create(
            product=product,
            sku=f'VAR_{TestDataFactory.random_string(8)}',
            attributes=attributes or {'size': 'M'},
            price=price,
            quantity=quantity
        )

    @staticmethod
    def create_discount(user, discount_type='percentage', value=None, products=(), categories=(), **kwargs):
        """Create an automatic discount; applies to every product unless scoped"""
        discount = Discount.objects.create(
            client_identifier=user.identifier,
            name=kwargs.pop('name', f'Discount_{TestDataFactory.random_string(6)}'),
            discount_type=discount_type,
            value=value if value is not None else Decimal('10.00'),
            **kwargs
        )
        if products:
            discount.applicable_products.set(products)
        if categories:
            discount.applicable_categories.set(categories)
        return discount

    @staticmethod
    def create_contact(user, first_name=None, last_name='Tester', contact_number=None, email=''):
        if not first_name:
            first_name = f'Contact_{TestDataFactory.random_string(6)}'
        if contact_number is None:
            contact_number = f'09{random.randint(100000000, 999999999)}'
        return Contact.objects.create(
            client_identifier=user.identifier,
            first_name=first_name,
            last_name=last_name,
            contact_number=contact_number,
            email=email
        )

    @staticmethod
    def create_team_member(user, roles=None, email=None, password='memberpass123', is_active=True):
        """Create a team member inside the user's tenant"""
        if not email:
            email = f'member_{TestDataFactory.random_string(6).lower()}@test.com'
        return TeamMember.objects.create(
            client_identifier=user.identifier,
            first_name='Team',
            last_name=TestDataFactory.random_string(5),
            email=email,
            password=make_password(password),
            roles=roles if roles is not None else ['user'],
            is_active=is_active
        )

    @staticmethod
    def create_restaurant(user, name=None, delivery_fee=None, minimum_order_amount=None, is_open=True,
                          status='active'):
        if not name:
            name = f'Restaurant {TestDataFactory.random_string(6)}'
        return Restaurant.objects.create(
            client_identifier=user.identifier,
            name=name,
            slug=f'restaurant-{TestDataFactory.random_string(8).lower()}',
            delivery_fee=delivery_fee if delivery_fee is not None else Decimal('50.00'),
            minimum_order_amount=minimum_order_amount if minimum_order_amount is not None else Decimal('0.00'),
            is_open=is_open,
            status=status
        )

    @staticmethod
    def create_menu_category(restaurant, name=None):
        return MenuCategory.objects.create(
            restaurant=restaurant,
            name=name or f'Menu_{TestDataFactory.random_string(6)}'
        )

    @staticmethod
    def create_menu_item(restaurant, name=None, price=None, category=None, is_available=True):
        return MenuItem.objects.create(
            restaurant=restaurant,
            category=category,
            name=name or f'Dish_{TestDataFactory.random_string(6)}',
            price=price if price is not None else Decimal('120.00'),
            is_available=is_available
        )

    @staticmethod
    def create_cart(user, channel='shop', restaurant=None):
        """Create an empty active cart the way the API does"""
        return cart_services.create_cart(user, channel=channel, restaurant=restaurant)

    @staticmethod
    def create_queue_type(user, name=None, prefix='A', is_active=True):
        return QueueType.objects.create(
            client_identifier=user.identifier,
            name=name or f'Queue_{TestDataFactory.random_string(6)}',
            prefix=prefix,
            is_active=is_active
        )

    @staticmethod
    def create_job_board(user, name=None, slug=None):
        return JobBoard.objects.create(
            client_identifier=user.identifier,
            name=name or f'Careers {TestDataFactory.random_string(6)}',
            slug=slug or f'careers-{TestDataFactory.random_string(8).lower()}'
        )

    @staticmethod
    def create_job(board, title=None, status='published', application_deadline=None):
        return Job.objects.create(
            board=board,
            title=title or f'Job_{TestDataFactory.random_string(6)}',
            description='Test job description',
            status=status,
            application_deadline=application_deadline
        )

    @staticmethod
    def create_course(user, title=None, status='published', certificate_enabled=False, lessons=0):
        """Create a course with `lessons` ordered lessons"""
        course = Course.objects.create(
            client_identifier=user.identifier,
            title=title or f'Course_{TestDataFactory.random_string(6)}',
            status=status,
            certificate_enabled=certificate_enabled
        )
        for index in range(lessons):
            Lesson.objects.create(course=course, title=f'Lesson {index + 1}', order=index)
        return course

    @staticmethod
    def create_family_member(user, first_name=None, last_name='Santos', gender='male', birth_date=None,
                             death_date=None):
        return FamilyMember.objects.create(
            client_identifier=user.identifier,
            first_name=first_name or f'Member_{TestDataFactory.random_string(6)}',
            last_name=last_name,
            gender=gender,
            birth_date=birth_date,
            death_date=death_date
        )

    @staticmethod
    def create_employee(user, employee_id=None, salary=None, hire_date=None, status='active'):
        return Employee.objects.create(
            client_identifier=user.identifier,
            employee_id=employee_id or f'EMP-{TestDataFactory.random_string(6).upper()}',
            first_name='Employee',
            last_name=TestDataFactory.random_string(5),
            salary=salary if salary is not None else Decimal('20000.00'),
            hire_date=hire_date or date(2023, 1, 1),
            status=status
        )

    @staticmethod
    def create_payroll_period(user, start_date=None, end_date=None, name=None):
        start_date = start_date or date(2024, 3, 1)
        return PayrollPeriod.objects.create(
            client_identifier=user.identifier,
            name=name or f'Payroll {start_date:%B %Y}',
            start_date=start_date,
            end_date=end_date or start_date + timedelta(days=30)
        )

    @staticmethod
    def create_post(user, title=None, slug=None, status='draft'):
        return Post.objects.create(
            client_identifier=user.identifier,
            title=title or f'Post {TestDataFactory.random_string(6)}',
            slug=slug or f'post-{TestDataFactory.random_string(8).lower()}',
            content='Test post content',
            author='Tester',
            status=status,
            published_at=timezone.now() if status == 'published' else None
        )

    @staticmethod
    def create_plan(name=None, price=None, duration_in_days=30, is_active=True):
        name = name or f'Plan {TestDataFactory.random_string(6)}'
        return SubscriptionPlan.objects.create(
            name=name,
            slug=f'plan-{TestDataFactory.random_string(8).lower()}',
            price=price if price is not None else Decimal('499.00'),
            duration_in_days=duration_in_days,
            is_active=is_active
        )

    @staticmethod
    def create_subscription(user, plan, status='pending', end_date=None):
        """Subscription row; active ones run for the plan duration unless `end_date` is given"""
        start_date = timezone.now() if status == 'active' else None
        if status == 'active' and end_date is None:
            end_date = start_date + timedelta(days=plan.duration_in_days)
        return UserSubscription.objects.create(
            user=user,
            plan=plan,
            status=status,
            start_date=start_date,
            end_date=end_date,
            amount_paid=plan.price if status == 'active' else Decimal('0.00')
        )


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def as_team_member(self, member):
        """Send requests on behalf of a team member of the authenticated owner"""
        self.credentials(**{**self._credentials, 'HTTP_X_TEAM_MEMBER': member.identifier})
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
