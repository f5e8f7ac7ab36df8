from paramesh.cli import main

raise SystemExit(main())
