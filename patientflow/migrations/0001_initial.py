import django.contrib.auth.models
import django.contrib.auth.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

import patientflow.models


FLOW_STATUS_CHOICES = [
    ('checked_in', 'Checked in'),
    ('rooming', 'Rooming'),
    ('vitals_complete', 'Vitals complete'),
    ('ready_for_provider', 'Ready for provider'),
    ('with_provider', 'With provider'),
    ('checkout', 'Checkout'),
    ('completed', 'Completed'),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('auth', '0012_alter_user_first_name_max_length'),
    ]

    operations = [
        migrations.CreateModel(
            name='Tenant',
            fields=[
                ('id', models.CharField(max_length=64, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=255)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
        ),
        migrations.CreateModel(
            name='User',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('password', models.CharField(max_length=128, verbose_name='password')),
                ('last_login', models.DateTimeField(blank=True, null=True, verbose_name='last login')),
                ('is_superuser', models.BooleanField(default=False, help_text='Designates that this user has all permissions without explicitly assigning them.', verbose_name='superuser status')),
                ('username', models.CharField(error_messages={'unique': 'A user with that username already exists.'}, help_text='Required. 150 characters or fewer. Letters, digits and @/./+/-/_ only.', max_length=150, unique=True, validators=[django.contrib.auth.validators.UnicodeUsernameValidator()], verbose_name='username')),
                ('first_name', models.CharField(blank=True, max_length=150, verbose_name='first name')),
                ('last_name', models.CharField(blank=True, max_length=150, verbose_name='last name')),
                ('email', models.EmailField(blank=True, max_length=254, verbose_name='email address')),
                ('is_staff', models.BooleanField(default=False, help_text='Designates whether the user can log into this admin site.', verbose_name='staff status')),
                ('is_active', models.BooleanField(default=True, help_text='Designates whether this user should be treated as active. Unselect this instead of deleting accounts.', verbose_name='active')),
                ('date_joined', models.DateTimeField(default=django.utils.timezone.now, verbose_name='date joined')),
                ('role', models.CharField(choices=[('admin', 'Administrator'), ('front_desk', 'Front desk'), ('ma', 'Medical assistant'), ('provider', 'Provider'), ('nurse', 'Nurse')], default='front_desk', max_length=16)),
                ('groups', models.ManyToManyField(blank=True, help_text='The groups this user belongs to. A user will get all permissions granted to each of their groups.', related_name='user_set', related_query_name='user', to='auth.group', verbose_name='groups')),
                ('user_permissions', models.ManyToManyField(blank=True, help_text='Specific permissions for this user.', related_name='user_set', related_query_name='user', to='auth.permission', verbose_name='user permissions')),
                ('tenant', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='users', to='patientflow.tenant')),
            ],
            options={
                'verbose_name': 'user',
                'verbose_name_plural': 'users',
                'abstract': False,
            },
            managers=[
                ('objects', django.contrib.auth.models.UserManager()),
            ],
        ),
        migrations.CreateModel(
            name='Location',
            fields=[
                ('id', models.CharField(default=patientflow.models.new_id, editable=False, max_length=64, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=255)),
                ('tenant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='locations', to='patientflow.tenant')),
            ],
        ),
        migrations.CreateModel(
            name='Patient',
            fields=[
                ('id', models.CharField(default=patientflow.models.new_id, editable=False, max_length=64, primary_key=True, serialize=False)),
                ('first_name', models.CharField(max_length=128)),
                ('last_name', models.CharField(max_length=128)),
                ('tenant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='patients', to='patientflow.tenant')),
            ],
        ),
        migrations.CreateModel(
            name='Appointment',
            fields=[
                ('id', models.CharField(default=patientflow.models.new_id, editable=False, max_length=64, primary_key=True, serialize=False)),
                ('appointment_type', models.CharField(blank=True, max_length=128)),
                ('scheduled_start', models.DateTimeField()),
                ('status', models.CharField(choices=[('scheduled', 'Scheduled'), ('checked_in', 'Checked in'), ('in_room', 'In room'), ('completed', 'Completed'), ('cancelled', 'Cancelled')], db_index=True, default='scheduled', max_length=20)),
                ('roomed_at', models.DateTimeField(blank=True, null=True)),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
                ('location', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='appointments', to='patientflow.location')),
                ('patient', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='appointments', to='patientflow.patient')),
                ('provider', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='provider_appointments', to=settings.AUTH_USER_MODEL)),
                ('tenant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='appointments', to='patientflow.tenant')),
            ],
            options={
                'indexes': [models.Index(fields=['tenant', 'scheduled_start'], name='patientflow_tenant__c1a6f4_idx')],
            },
        ),
        migrations.CreateModel(
            name='ExamRoom',
            fields=[
                ('id', models.CharField(default=patientflow.models.new_id, editable=False, max_length=64, primary_key=True, serialize=False)),
                ('room_name', models.CharField(max_length=128)),
                ('room_number', models.CharField(max_length=32)),
                ('room_type', models.CharField(choices=[('exam', 'Exam'), ('procedure', 'Procedure'), ('consult', 'Consult'), ('triage', 'Triage')], default='exam', max_length=16)),
                ('is_active', models.BooleanField(db_index=True, default=True)),
                ('display_order', models.IntegerField(default=0)),
                ('equipment', models.JSONField(blank=True, default=list)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('location', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='rooms', to='patientflow.location')),
                ('tenant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='rooms', to='patientflow.tenant')),
            ],
            options={
                'ordering': ['display_order', 'room_number'],
                'indexes': [models.Index(fields=['tenant', 'location', 'is_active'], name='patientflow_tenant__5b0e2d_idx')],
            },
        ),
        migrations.CreateModel(
            name='PatientFlow',
            fields=[
                ('id', models.CharField(default=patientflow.models.new_id, editable=False, max_length=64, primary_key=True, serialize=False)),
                ('status', models.CharField(choices=FLOW_STATUS_CHOICES, db_index=True, max_length=20)),
                ('status_changed_at', models.DateTimeField()),
                ('checked_in_at', models.DateTimeField(blank=True, null=True)),
                ('rooming_at', models.DateTimeField(blank=True, null=True)),
                ('vitals_complete_at', models.DateTimeField(blank=True, null=True)),
                ('ready_for_provider_at', models.DateTimeField(blank=True, null=True)),
                ('with_provider_at', models.DateTimeField(blank=True, null=True)),
                ('checkout_at', models.DateTimeField(blank=True, null=True)),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
                ('priority', models.CharField(choices=[('normal', 'Normal'), ('urgent', 'Urgent'), ('add-on', 'Add-on')], db_index=True, default='normal', max_length=10)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('appointment', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='flows', to='patientflow.appointment')),
                ('assigned_ma', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='ma_flows', to=settings.AUTH_USER_MODEL)),
                ('assigned_provider', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='provider_flows', to=settings.AUTH_USER_MODEL)),
                ('patient', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='flows', to='patientflow.patient')),
                ('room', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='flows', to='patientflow.examroom')),
                ('tenant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='flows', to='patientflow.tenant')),
            ],
            options={
                'indexes': [
                    models.Index(fields=['tenant', 'room', 'status'], name='patientflow_tenant__8d21c7_idx'),
                    models.Index(fields=['tenant', 'assigned_provider', 'status'], name='patientflow_tenant__e47a90_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('tenant', 'appointment'), name='uniq_flow_per_appointment'),
                ],
            },
        ),
        migrations.CreateModel(
            name='FlowStatusHistory',
            fields=[
                ('id', models.CharField(default=patientflow.models.new_id, editable=False, max_length=64, primary_key=True, serialize=False)),
                ('sequence', models.PositiveIntegerField()),
                ('from_status', models.CharField(blank=True, choices=FLOW_STATUS_CHOICES, max_length=20, null=True)),
                ('to_status', models.CharField(choices=FLOW_STATUS_CHOICES, max_length=20)),
                ('changed_at', models.DateTimeField()),
                ('notes', models.TextField(blank=True)),
                ('duration_seconds', models.PositiveIntegerField(blank=True, null=True)),
                ('changed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='flow_changes', to=settings.AUTH_USER_MODEL)),
                ('flow', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='history', to='patientflow.patientflow')),
                ('room', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='history', to='patientflow.examroom')),
                ('tenant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='flow_history', to='patientflow.tenant')),
            ],
            options={
                'ordering': ['flow', 'sequence'],
                'indexes': [models.Index(fields=['flow', 'changed_at'], name='patientflow_flow_id_3f9b1e_idx')],
                'constraints': [
                    models.UniqueConstraint(fields=('flow', 'sequence'), name='uniq_history_sequence'),
                ],
            },
        ),
        migrations.CreateModel(
            name='RoomAssignment',
            fields=[
                ('id', models.CharField(default=patientflow.models.new_id, editable=False, max_length=64, primary_key=True, serialize=False)),
                ('day_of_week', models.PositiveSmallIntegerField()),
                ('time_slot', models.CharField(choices=[('all_day', 'All day'), ('am', 'Morning'), ('pm', 'Afternoon')], default='all_day', max_length=16)),
                ('effective_date', models.DateField(blank=True, null=True)),
                ('end_date', models.DateField(blank=True, null=True)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('provider', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='room_assignments', to=settings.AUTH_USER_MODEL)),
                ('room', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='assignments', to='patientflow.examroom')),
                ('tenant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='room_assignments', to='patientflow.tenant')),
            ],
            options={
                'constraints': [
                    models.UniqueConstraint(fields=('tenant', 'room', 'day_of_week', 'time_slot'), name='uniq_room_assignment_slot'),
                ],
            },
        ),
    ]
