import django.contrib.auth.models
import django.contrib.auth.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('auth', '0012_alter_user_first_name_max_length'),
    ]

    operations = [
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
                ('role', models.CharField(choices=[('staff', 'Staff'), ('admin', 'Administrator'), ('super', 'Super Administrator')], default='staff', max_length=10)),
                ('groups', models.ManyToManyField(blank=True, help_text='The groups this user belongs to. A user will get all permissions granted to each of their groups.', related_name='user_set', related_query_name='user', to='auth.group', verbose_name='groups')),
                ('user_permissions', models.ManyToManyField(blank=True, help_text='Specific permissions for this user.', related_name='user_set', related_query_name='user', to='auth.permission', verbose_name='user permissions')),
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
            name='BedManagement',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('room_type', models.CharField(db_index=True, max_length=50)),
                ('bed_number', models.CharField(max_length=20)),
                ('bed_type', models.CharField(blank=True, max_length=50)),
                ('status', models.CharField(default='available', max_length=20)),
            ],
        ),
        migrations.CreateModel(
            name='PatientDetail',
            fields=[
                ('patient_id', models.AutoField(primary_key=True, serialize=False)),
                ('uhid', models.CharField(max_length=32, unique=True)),
                ('name', models.CharField(max_length=255)),
                ('number', models.CharField(blank=True, db_index=True, max_length=20)),
                ('age', models.PositiveIntegerField(blank=True, null=True)),
                ('age_unit', models.CharField(blank=True, max_length=10)),
                ('gender', models.CharField(blank=True, max_length=10)),
                ('address', models.TextField(blank=True)),
                ('dob', models.DateField(blank=True, null=True)),
            ],
        ),
        migrations.CreateModel(
            name='IPDRegistration',
            fields=[
                ('ipd_id', models.AutoField(primary_key=True, serialize=False)),
                ('payment_detail', models.JSONField(blank=True, default=list)),
                ('tpa', models.BooleanField(blank=True, null=True)),
                ('under_care_of_doctor', models.CharField(blank=True, max_length=255)),
                ('admission_date', models.DateField(blank=True, null=True)),
                ('discharge_date', models.DateField(blank=True, db_index=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('bed', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='registrations', to='records.bedmanagement')),
                ('patient', models.ForeignKey(db_column='uhid', on_delete=django.db.models.deletion.PROTECT, related_name='ipd_registrations', to='records.patientdetail', to_field='uhid')),
            ],
            options={
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='DischargeSummary',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('discharge_type', models.CharField(blank=True, max_length=50, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('registration', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='discharge_summaries', to='records.ipdregistration')),
            ],
            options={
                'ordering': ['created_at'],
            },
        ),
        migrations.CreateModel(
            name='OPDRegistration',
            fields=[
                ('opd_id', models.AutoField(primary_key=True, serialize=False)),
                ('date', models.DateTimeField(db_index=True)),
                ('refer_by', models.CharField(blank=True, max_length=255)),
                ('additional_notes', models.TextField(blank=True)),
                ('service_info', models.JSONField(blank=True, default=list)),
                ('payment_info', models.JSONField(blank=True, default=dict)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('patient', models.ForeignKey(db_column='uhid', on_delete=django.db.models.deletion.PROTECT, related_name='opd_registrations', to='records.patientdetail', to_field='uhid')),
            ],
        ),
        migrations.CreateModel(
            name='UserHealthDetail',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('patient_uhid', models.CharField(db_index=True, max_length=32)),
                ('indoor_patient_progress_digital_data', models.JSONField(blank=True, default=list)),
                ('daily_drug_chart_data', models.JSONField(blank=True, default=list)),
                ('dr_visit_form_data', models.JSONField(blank=True, default=list)),
                ('patient_charges_form_data', models.JSONField(blank=True, default=list)),
                ('glucose_monitoring_sheet_data', models.JSONField(blank=True, default=list)),
                ('pt_admission_assessment_nursing_data', models.JSONField(blank=True, default=list)),
                ('clinical_notes_data', models.JSONField(blank=True, default=list)),
                ('investigation_sheet_data', models.JSONField(blank=True, default=list)),
                ('progress_notes_data', models.JSONField(blank=True, default=list)),
                ('consent_data', models.JSONField(blank=True, default=list)),
                ('ot_data', models.JSONField(blank=True, default=list)),
                ('nursing_notes_data', models.JSONField(blank=True, default=list)),
                ('tpr_intake_output_data', models.JSONField(blank=True, default=list)),
                ('discharge_dama_data', models.JSONField(blank=True, default=list)),
                ('casualty_note_data', models.JSONField(blank=True, default=list)),
                ('indoor_patient_file_data', models.JSONField(blank=True, default=list)),
                ('icu_chart_data', models.JSONField(blank=True, default=list)),
                ('transfer_summary_data', models.JSONField(blank=True, default=list)),
                ('prescription_sheet_data', models.JSONField(blank=True, default=list)),
                ('billing_consent_data', models.JSONField(blank=True, default=list)),
                ('custom_groups_data', models.JSONField(blank=True, default=list)),
                ('discharge_summary_written', models.JSONField(blank=True, db_column='dischare_summary_written', null=True)),
                ('registration', models.OneToOneField(db_column='ipd_registration_id', on_delete=django.db.models.deletion.CASCADE, related_name='health_detail', to='records.ipdregistration')),
            ],
        ),
        migrations.CreateModel(
            name='IPDPage',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('uhid', models.CharField(db_index=True, max_length=32)),
                ('page_number', models.IntegerField(default=0)),
                ('page_name', models.CharField(blank=True, max_length=255)),
                ('group_name', models.CharField(blank=True, db_index=True, max_length=255)),
                ('template_image_url', models.CharField(blank=True, max_length=500)),
                ('location_tag', models.CharField(blank=True, max_length=255)),
                ('canvas_data', models.JSONField(blank=True, default=dict)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('registration', models.ForeignKey(db_column='ipd_id', on_delete=django.db.models.deletion.CASCADE, related_name='pages', to='records.ipdregistration')),
            ],
            options={
                'indexes': [models.Index(fields=['registration', 'uhid'], name='records_ipd_ipd_id_6c1f0e_idx')],
            },
        ),
        migrations.CreateModel(
            name='AuditEvent',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('action', models.CharField(max_length=64)),
                ('object_type', models.CharField(blank=True, max_length=64, null=True)),
                ('object_id', models.IntegerField(blank=True, null=True)),
                ('detail', models.JSONField(blank=True, default=dict)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'indexes': [
                    models.Index(fields=['action', 'created_at'], name='records_aud_action_3f2a1b_idx'),
                    models.Index(fields=['object_type', 'object_id', 'created_at'], name='records_aud_object__9d4c2e_idx'),
                ],
            },
        ),
    ]
