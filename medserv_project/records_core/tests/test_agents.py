from django.core import signing
from django.core.exceptions import ValidationError
from django.test import TestCase

from ..exceptions import AuthenticationFailed, DuplicateKey
from ..models import Agent
from ..services import agents


class AgentTests(TestCase):
    def setUp(self):
        self.agent = agents.create_agent(
            {"name": "Sara", "email": "Sara@Example.com", "password": "secret123",
             "permissions": ["dashboard", "inventory"]}
        )

    def test_password_is_hashed(self):
        self.assertEqual(self.agent.email, "sara@example.com")
        self.assertNotEqual(self.agent.password, "secret123")
        self.assertTrue(self.agent.check_password("secret123"))

    def test_duplicate_email(self):
        with self.assertRaises(DuplicateKey):
            agents.create_agent({"name": "Other", "email": "sara@example.com", "password": "abcdef"})

    def test_short_password_and_missing_email(self):
        with self.assertRaises(ValidationError):
            agents.create_agent({"name": "Bob", "email": "bob@example.com", "password": "123"})
        with self.assertRaises(ValidationError):
            agents.create_agent({"name": "Bob", "email": "", "password": "abcdef"})

    def test_unknown_permission(self):
        with self.assertRaises(ValidationError):
            agents.update_agent(self.agent, {"permissions": ["launch-rockets"]})

    def test_update_rehashes_password(self):
        agents.update_agent(self.agent, {"password": "newpass99"})
        agent = Agent.objects.get(pk=self.agent.pk)
        self.assertTrue(agent.check_password("newpass99"))
        self.assertFalse(agent.check_password("secret123"))

    def test_login_issues_a_token(self):
        token, agent = agents.authenticate("SARA@example.com ", "secret123")
        self.assertEqual(agent.pk, self.agent.pk)
        self.assertEqual(agents.verify_token(token).pk, self.agent.pk)

    def test_bad_credentials(self):
        with self.assertRaises(AuthenticationFailed):
            agents.authenticate("sara@example.com", "wrong-password")
        with self.assertRaises(AuthenticationFailed):
            agents.authenticate("nobody@example.com", "secret123")

    def test_tampered_token(self):
        token = signing.dumps({"id": self.agent.pk, "email": self.agent.email}, salt="other")
        with self.assertRaises(AuthenticationFailed):
            agents.verify_token(token)

    def test_stats(self):
        agents.create_agent(
            {"name": "Omar", "email": "omar@example.com", "password": "abcdef",
             "status": "Inactive", "sales": "1000"}
        )
        stats = agents.agent_stats()
        self.assertEqual(stats["totalAgents"], 2)
        self.assertEqual(stats["activeAgents"], 1)
        self.assertEqual(str(stats["totalSales"]), "1000.00")
        self.assertEqual(str(stats["averageSales"]), "500.00")
