from median_bootstrap.cli import main

raise SystemExit(main())
