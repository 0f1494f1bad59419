import uuid

import django.contrib.auth.models
import django.contrib.auth.validators
import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

	initial = True

	dependencies = [
		("auth", "0012_alter_user_first_name_max_length"),
	]

	operations = [
		migrations.CreateModel(
			name="Role",
			fields=[
				("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
				("name", models.CharField(db_index=True, max_length=64, unique=True)),
				("label", models.CharField(max_length=128)),
				("created_at", models.DateTimeField(auto_now_add=True)),
			],
			options={
				"verbose_name": "Role",
				"verbose_name_plural": "Roles",
				"db_table": "core_role",
				"ordering": ["name"],
			},
		),
		migrations.CreateModel(
			name="DocumentType",
			fields=[
				("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
				("name", models.CharField(max_length=100, unique=True)),
				("created_at", models.DateTimeField(auto_now_add=True)),
			],
			options={
				"verbose_name": "Document Type",
				"verbose_name_plural": "Document Types",
				"db_table": "core_document_type",
				"ordering": ["name"],
			},
		),
		migrations.CreateModel(
			name="User",
			fields=[
				("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
				("password", models.CharField(max_length=128, verbose_name="password")),
				("last_login", models.DateTimeField(blank=True, null=True, verbose_name="last login")),
				(
					"is_superuser",
					models.BooleanField(
						default=False,
						help_text="Designates that this user has all permissions without explicitly assigning them.",
						verbose_name="superuser status",
					),
				),
				(
					"username",
					models.CharField(
						error_messages={"unique": "A user with that username already exists."},
						help_text="Required. 150 characters or fewer. Letters, digits and @/./+/-/_ only.",
						max_length=150,
						unique=True,
						validators=[django.contrib.auth.validators.UnicodeUsernameValidator()],
						verbose_name="username",
					),
				),
				("first_name", models.CharField(blank=True, max_length=150, verbose_name="first name")),
				("last_name", models.CharField(blank=True, max_length=150, verbose_name="last name")),
				(
					"is_staff",
					models.BooleanField(
						default=False,
						help_text="Designates whether the user can log into this admin site.",
						verbose_name="staff status",
					),
				),
				(
					"is_active",
					models.BooleanField(
						default=True,
						help_text="Designates whether this user should be treated as active. Unselect this instead of deleting accounts.",
						verbose_name="active",
					),
				),
				("date_joined", models.DateTimeField(default=django.utils.timezone.now, verbose_name="date joined")),
				("uuid", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
				("email", models.EmailField(blank=True, max_length=254, unique=True, verbose_name="email address")),
				("phone", models.CharField(blank=True, default="", max_length=20)),
				("specialty", models.CharField(blank=True, default="", max_length=100)),
				("document_number", models.CharField(blank=True, default="", max_length=50)),
				("created_at", models.DateTimeField(auto_now_add=True)),
				("updated_at", models.DateTimeField(auto_now=True)),
				(
					"role",
					models.ForeignKey(
						blank=True,
						null=True,
						on_delete=django.db.models.deletion.PROTECT,
						related_name="users",
						to="core.role",
					),
				),
				(
					"document_type",
					models.ForeignKey(
						blank=True,
						null=True,
						on_delete=django.db.models.deletion.SET_NULL,
						related_name="users",
						to="core.documenttype",
					),
				),
				(
					"groups",
					models.ManyToManyField(
						blank=True,
						help_text="The groups this user belongs to. A user will get all permissions granted to each of their groups.",
						related_name="user_set",
						related_query_name="user",
						to="auth.group",
						verbose_name="groups",
					),
				),
				(
					"user_permissions",
					models.ManyToManyField(
						blank=True,
						help_text="Specific permissions for this user.",
						related_name="user_set",
						related_query_name="user",
						to="auth.permission",
						verbose_name="user permissions",
					),
				),
			],
			options={
				"verbose_name": "User",
				"verbose_name_plural": "Users",
				"db_table": "core_user",
				"ordering": ["username"],
			},
			managers=[
				("objects", django.contrib.auth.models.UserManager()),
			],
		),
	]
