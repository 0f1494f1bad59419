from django.contrib import admin

from .models import DoctorPatient, Patient


class DoctorPatientInline(admin.TabularInline):
    model = DoctorPatient
    extra = 0
    readonly_fields = ('uuid', 'created_at')


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ('name', 'dob', 'gender', 'email', 'phone', 'created_at')
    list_filter = ('gender',)
    search_fields = ('name', 'email', 'phone')
    readonly_fields = ('uuid', 'created_at', 'updated_at')
    inlines = [DoctorPatientInline]
