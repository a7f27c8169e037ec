from types import SimpleNamespace

from django.contrib.auth.models import AnonymousUser
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from accounts.models import User
from accounts.rbac import AmendmentAction, can_perform, get_user_role, normalize_role


class CapabilityGuardTests(TestCase):
    def test_hr_and_management_can_do_everything(self):
        for role in (User.ROLE_HR, User.ROLE_MANAGEMENT):
            for action in AmendmentAction.ALL:
                with self.subTest(role=role, action=action):
                    self.assertTrue(can_perform(role, action))

    def test_other_roles_are_denied(self):
        for role in (User.ROLE_EMPLOYEE, User.ROLE_FINANCE, 'CONTRACTOR', '', None):
            for action in AmendmentAction.ALL:
                with self.subTest(role=role, action=action):
                    self.assertFalse(can_perform(role, action))

    def test_unknown_action_is_denied(self):
        self.assertFalse(can_perform(User.ROLE_HR, 'delete'))
        self.assertFalse(can_perform(User.ROLE_MANAGEMENT, None))

    def test_role_names_are_normalized(self):
        self.assertEqual(normalize_role(' hr '), User.ROLE_HR)
        self.assertEqual(normalize_role('admin'), User.ROLE_MANAGEMENT)
        self.assertIsNone(normalize_role('   '))
        self.assertIsNone(normalize_role(42))
        self.assertTrue(can_perform('ADMIN', AmendmentAction.APPROVE))
        self.assertTrue(can_perform('management', AmendmentAction.APPLY))

    def test_get_user_role(self):
        user = User(email='role@example.com', role=User.ROLE_HR)
        self.assertEqual(get_user_role(user), User.ROLE_HR)
        self.assertIsNone(get_user_role(AnonymousUser()))
        self.assertIsNone(get_user_role(None))
        self.assertIsNone(get_user_role(SimpleNamespace(is_authenticated=True)))


class UserModelTests(TestCase):
    def test_create_user_defaults_to_employee(self):
        user = User.objects.create_user(email='New@Example.com', password='pass')
        self.assertEqual(user.role, User.ROLE_EMPLOYEE)
        self.assertEqual(user.email, 'New@example.com')
        self.assertTrue(user.check_password('pass'))
        self.assertFalse(user.is_hr_staff)

    def test_create_user_requires_email(self):
        with self.assertRaises(ValueError):
            User.objects.create_user(email='', password='pass')

    def test_superuser_is_management(self):
        admin = User.objects.create_superuser(email='root@example.com', password='pass')
        self.assertEqual(admin.role, User.ROLE_MANAGEMENT)
        self.assertTrue(admin.is_staff)
        self.assertTrue(admin.is_hr_staff)


class AuthEndpointsTests(APITestCase):
    def setUp(self):
        self.user = User.objects.create_user(email='hr-login@example.com', password='secret-pass', role=User.ROLE_HR)

    def test_login_returns_tokens_and_role(self):
        response = self.client.post(
            reverse('accounts:login'),
            {'email': 'hr-login@example.com', 'password': 'secret-pass'},
            format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['data']['user']['role'], User.ROLE_HR)
        self.assertIn('access', response.data['data']['tokens'])
        self.assertIn('refresh', response.data['data']['tokens'])

    def test_login_with_wrong_password(self):
        response = self.client.post(
            reverse('accounts:login'),
            {'email': 'hr-login@example.com', 'password': 'wrong'},
            format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data['success'])
        self.assertEqual(response.data['error'], 'VALIDATION_ERROR')

    def test_profile_requires_authentication(self):
        response = self.client.get(reverse('accounts:user-profile'))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(response.data['success'])

        self.client.force_authenticate(user=self.user)
        response = self.client.get(reverse('accounts:user-profile'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['email'], 'hr-login@example.com')
