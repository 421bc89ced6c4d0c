from django.core.management.base import BaseCommand

from flow_core.workflows.analytics import find_department_overruns


class Command(BaseCommand):
    help = "List current department entries of active projects that exceed their estimated days"

    def handle(self, *args, **options):
        overruns = find_department_overruns()

        for row in overruns:
            self.stdout.write(
                f"project={row['project_id']} department={row['department']} "
                f"status={row['work_status']} spent={row['days_spent']} "
                f"estimated={row['estimated_days']}"
            )

        self.stdout.write(self.style.SUCCESS(f"{len(overruns)} overrun(s) found"))
