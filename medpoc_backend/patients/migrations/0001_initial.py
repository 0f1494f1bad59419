import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Patient',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('uuid', models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ('name', models.CharField(max_length=100)),
                ('dob', models.DateField(blank=True, null=True)),
                (
                    'gender',
                    models.CharField(
                        blank=True,
                        choices=[('male', 'Male'), ('female', 'Female'), ('other', 'Other')],
                        default='',
                        max_length=10,
                    ),
                ),
                ('email', models.EmailField(blank=True, default='', max_length=254)),
                ('phone', models.CharField(blank=True, default='', max_length=20)),
                ('address', models.TextField(blank=True, default='')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Patient',
                'verbose_name_plural': 'Patients',
                'db_table': 'patients_patient',
                'ordering': ['name', 'id'],
            },
        ),
        migrations.CreateModel(
            name='DoctorPatient',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('uuid', models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                (
                    'doctor',
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name='patient_links',
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    'patient',
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name='doctor_links',
                        to='patients.patient',
                    ),
                ),
            ],
            options={
                'verbose_name': 'Doctor-Patient Link',
                'verbose_name_plural': 'Doctor-Patient Links',
                'db_table': 'patients_doctor_patient',
                'constraints': [
                    models.UniqueConstraint(fields=('doctor', 'patient'), name='uniq_doctor_patient'),
                ],
            },
        ),
    ]
